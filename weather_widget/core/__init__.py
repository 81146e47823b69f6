"""Ядро конвейера обновления виджета."""
