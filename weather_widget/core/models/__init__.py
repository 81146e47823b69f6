"""Модели данных виджета."""
