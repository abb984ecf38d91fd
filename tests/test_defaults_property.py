from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel

from propertykit.defaults import Defaults, DefaultsProperty


class CustomValueType(BaseModel):
    key: str = "value"


class AppDefaults(Defaults):
    auto_string_property = DefaultsProperty(str)
    auto_date_property = DefaultsProperty(datetime)
    auto_custom_non_optional_property = DefaultsProperty(CustomValueType, default=CustomValueType())
    auto_custom_optional_property = DefaultsProperty(CustomValueType)
    auto_custom_optional_property_setter_default_value = DefaultsProperty(
        CustomValueType, set_default=CustomValueType()
    )
    renamed = DefaultsProperty(int, key="legacy.renamed")


def test_key_is_attribute_name() -> None:
    defaults = AppDefaults()

    defaults.auto_string_property = "string value"

    assert defaults.has("auto_string_property")
    assert AppDefaults.shared().auto_string_property == "string value"


def test_explicit_key_overrides_attribute_name() -> None:
    defaults = AppDefaults()

    defaults.renamed = 5

    assert defaults.has("legacy.renamed")
    assert not defaults.has("renamed")
    assert AppDefaults.renamed.property.key == "legacy.renamed"


def test_suites_do_not_leak_through_properties() -> None:
    local = AppDefaults("local")
    local.auto_string_property = "1"

    shared = AppDefaults()
    shared.auto_string_property = "string value"

    assert local.auto_string_property != shared.auto_string_property


def test_date_property_round_trips() -> None:
    defaults = AppDefaults()
    moment = datetime(2026, 10, 17, 8, 0, tzinfo=UTC)

    defaults.auto_date_property = moment

    assert defaults.auto_date_property == moment


def test_optional_custom_property_without_default() -> None:
    defaults = AppDefaults()

    assert defaults.auto_custom_optional_property is None
    assert not defaults.has("auto_custom_optional_property")

    defaults.auto_custom_optional_property = CustomValueType()
    assert defaults.auto_custom_optional_property is not None

    defaults.auto_custom_optional_property = None
    assert defaults.auto_custom_optional_property is None
    assert not defaults.has("auto_custom_optional_property")


def test_setter_default_replaces_none() -> None:
    defaults = AppDefaults()

    defaults.auto_custom_optional_property_setter_default_value = None

    assert defaults.auto_custom_optional_property_setter_default_value == CustomValueType()


def test_non_optional_property_persists_its_default() -> None:
    defaults = AppDefaults()

    assert defaults.auto_custom_non_optional_property.key == "value"
    assert defaults.has("auto_custom_non_optional_property")


def test_delete_clears_slot() -> None:
    defaults = AppDefaults()
    defaults.auto_string_property = "gone soon"

    del defaults.auto_string_property

    assert not defaults.has("auto_string_property")
