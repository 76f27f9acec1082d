# finbro/core/categorizer.py
from finbro.core.models import Category


def parse_category(value):
    if isinstance(value, Category):
        return value
    if value is None:
        return Category.OTHERS
    name = str(value).strip().lower()
    for cat in Category:
        if name in (cat.value.lower(), cat.name.lower()):
            return cat
    return Category.OTHERS
