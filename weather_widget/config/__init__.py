"""Конфигурация виджета: переменные окружения, пути, логирование."""
