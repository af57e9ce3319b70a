"""Approved business categories.

Static for now; the list changes rarely enough that a table is not worth it yet.
"""

from b2y.models.category import Category

APPROVED_CATEGORIES: tuple[Category, ...] = (
    Category(id="1", name="Restaurantes"),
    Category(id="2", name="Tecnologia"),
    Category(id="3", name="Varejo"),
    Category(id="4", name="Saúde & Bem-estar"),
    Category(id="5", name="Educação"),
    Category(id="6", name="Serviços Automotivos"),
    Category(id="7", name="Indústria Leve"),
    Category(id="8", name="Beleza & Estética"),
    Category(id="9", name="Agronegócio"),
    Category(id="10", name="Commodities"),
)


def list_categories() -> list[Category]:
    return list(APPROVED_CATEGORIES)
