# -*- coding: utf-8 -*-
"""
Погодный виджет: конвейер обновления таймлайна.

Цепочка: локация → обратный геокодинг → прогноз → таймлайн с политикой
устаревания кэша.
"""

__version__ = "1.0.0"
