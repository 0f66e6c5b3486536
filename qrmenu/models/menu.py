# qrmenu/models/menu.py
from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional

# The menu document is stored with camelCase keys; unknown keys written by
# older admin tools are kept and written back untouched.
_document_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

LOCALIZED_FIELDS = ("name", "short_description", "long_description")


class LocalizedFields(BaseModel):
    model_config = _document_config

    name: Optional[str] = None
    short_description: Optional[str] = None
    long_description: Optional[str] = None


class MenuItem(BaseModel):
    model_config = _document_config

    id: str
    name: str
    price: str = ""
    short_description: str = ""
    long_description: str = ""
    image: Optional[str] = None
    translations: Optional[Dict[str, LocalizedFields]] = None

    def localized(self, language: str) -> Dict[str, str]:
        """
        Return name and descriptions for ``language``.

        A field comes from ``translations[language]`` when that translation
        exists and the value is not empty, otherwise the base-language field
        is used.
        """
        translation = (self.translations or {}).get(language)
        fields = {}
        for field in LOCALIZED_FIELDS:
            value = getattr(translation, field, None) if translation else None
            fields[field] = value if value else getattr(self, field)
        return fields


class Category(BaseModel):
    model_config = _document_config

    items: List[MenuItem] = Field(default_factory=list)
    display_names: Optional[Dict[str, str]] = None

    def find_item(self, item_id: str) -> int:
        """Index of the item with ``item_id``, or -1"""
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return -1


class MenuDocument(RootModel[Dict[str, Category]]):
    """The whole menu: category name -> category, in insertion order"""

    def __contains__(self, name: str) -> bool:
        return name in self.root

    def __getitem__(self, name: str) -> Category:
        return self.root[name]

    def categories(self):
        return self.root.items()

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ChangeLogEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str
    item_name: str
    timestamp: str


# API payloads

class ItemResponse(BaseModel):
    success: bool
    item: Optional[dict] = None


class CategoryCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    display_names: Optional[Dict[str, str]] = None


class PublicMenuItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    price: str
    short_description: str
    long_description: str
    image_url: Optional[str] = None


class PublicCategory(BaseModel):
    key: str
    title: str
    items: List[PublicMenuItem]


class PublicMenuResponse(BaseModel):
    language: str
    categories: List[PublicCategory]
