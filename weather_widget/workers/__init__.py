"""Фоновые воркеры."""
