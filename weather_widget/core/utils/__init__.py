"""Клиенты и утилиты конвейера."""
