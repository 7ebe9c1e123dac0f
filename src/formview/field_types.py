from dataclasses import dataclass

@dataclass(frozen=True)
class FieldTypeSpec:
    key: str                      # internal key used in seed plans, e.g. "single_line_text"
    uidt: str                     # UI data type understood by the backend
    display_name: str             # label shown in the column-type dropdown
    virtual: bool = False         # True for computed/relation columns (no physical column)
    fillable: bool = True         # can be typed into on a form

FIELD_TYPES: dict[str, FieldTypeSpec] = {
    "id": FieldTypeSpec(
        key="id",
        uidt="ID",
        display_name="ID",
        fillable=False,
    ),
    "single_line_text": FieldTypeSpec(
        key="single_line_text",
        uidt="SingleLineText",
        display_name="SingleLineText",
    ),
    "long_text": FieldTypeSpec(
        key="long_text",
        uidt="LongText",
        display_name="LongText",
    ),
    "number": FieldTypeSpec(
        key="number",
        uidt="Number",
        display_name="Number",
    ),
    "date_time": FieldTypeSpec(
        key="date_time",
        uidt="DateTime",
        display_name="DateTime",
    ),
    "attachment": FieldTypeSpec(
        key="attachment",
        uidt="Attachment",
        display_name="Attachment",
        fillable=False,  # upload, not typed
    ),
    "link_to_another_record": FieldTypeSpec(
        key="link_to_another_record",
        uidt="LinkToAnotherRecord",
        display_name="LinkToAnotherRecord",
        virtual=True,
        fillable=False,  # picked from the child list
    ),
}

_BY_UIDT = {spec.uidt: spec for spec in FIELD_TYPES.values()}


def spec_for(key_or_uidt: str) -> FieldTypeSpec:
    """
    Look up by internal key first, then by backend UI data type.
    """
    spec = FIELD_TYPES.get(key_or_uidt) or _BY_UIDT.get(key_or_uidt)
    if spec is None:
        raise KeyError(f"Unknown field type {key_or_uidt!r}")
    return spec
