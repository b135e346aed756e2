"""
Column alias tables for the supported import schemas.

Each table maps a human-readable header label to a canonical field id.
Declaration order matters: the substring fallback in the column mapper
takes the first alias that matches.
"""

# Canonical record fields (see models.record.CanonicalRecord)
MATERIAL_COLUMN_ALIASES: dict[str, str] = {
    "№": "position",
    "Позиция": "position",
    "Наименования": "name",
    "Наименование": "name",
    "Тип, марка": "type_mark",
    "Тип/марка": "type_mark",
    "Код оборудования": "code",
    "Код": "code",
    "Артикул": "code",
    "Завод изготовитель": "manufacturer",
    "Производитель": "manufacturer",
    "Завод": "manufacturer",
    "Единица измерения": "unit",
    "Ед. изм.": "unit",
    "Ед.": "unit",
    "Количество": "quantity",
    "Кол-во": "quantity",
    "Стоимость": "price",
    "Цена": "price",
    "Основание": "price_source",
    "Источник": "price_source",
    "Код товара": "product_code",
    "Примечания": "notes",
    "Примечание": "notes",
}

# Equipment specification sheets (long, multi-line headers)
EQUIPMENT_COLUMN_ALIASES: dict[str, str] = {
    "Позиция": "position",
    "Наименования и технические характеристики": "name",
    "Тип, марка, обозначение документов, опросного листа": "type_mark",
    "Код оборудования, изделия, материалов, № опросного листа": "code",
    "Завод изготовитель": "manufacturer",
    "Единица измерения": "unit",
    "Кол-во": "quantity",
    "Количество": "quantity",
}

# Price-list catalog exports (see models.catalog.CatalogProduct)
PRODUCT_COLUMN_ALIASES: dict[str, str] = {
    "id": "id",
    "name": "name",
    "brand": "brand",
    "article": "article",
    "brand_code": "brand_code",
    "cli_code": "cli_code",
    "class": "class_name",
    "class_code": "class_code",
    "Наименование": "name",
    "Бренд": "brand",
    "Артикул": "article",
    "Код бренда": "brand_code",
    "Класс": "class_name",
    "Код класса": "class_code",
}

ALIAS_TABLES: dict[str, dict[str, str]] = {
    "material": MATERIAL_COLUMN_ALIASES,
    "equipment": EQUIPMENT_COLUMN_ALIASES,
    "product": PRODUCT_COLUMN_ALIASES,
}
