"""Хранилища виджета."""
