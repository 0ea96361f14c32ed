import pytest

from biketrail.profile import RiderProfile


@pytest.mark.parametrize(
    "key, raw, expected",
    [
        ("name", "  Ana ", "Ana"),
        ("age", "34", 34),
        ("weight_kg", "61.5", 61.5),
        ("height_cm", "", None),
        ("emergency_phone", "+1 555 0100", "+1 555 0100"),
    ],
)
def test_with_value_coerces(key, raw, expected):
    assert getattr(RiderProfile().with_value(key, raw), key) == expected


def test_with_value_rejects_unknown_field_and_bad_numbers():
    with pytest.raises(ValueError):
        RiderProfile().with_value("shoe_size", "44")
    with pytest.raises(ValueError):
        RiderProfile().with_value("age", "old")
