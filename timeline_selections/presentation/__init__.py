# timeline_selections/presentation/__init__.py

"""
Слой presentation — входная точка системы.
Здесь HTTP-роуты и usecase-хэндлеры (их же можно запускать как CLI).
"""

__all__ = [
    "http",
    "usecases",
]
