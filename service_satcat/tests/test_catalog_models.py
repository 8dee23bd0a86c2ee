"""
Unit tests for tracked object parsing.
"""

import pytest

from service_satcat.app.catalog.models import ObjectType, OrbitSummary, TrackedObject
from shared.errors import ParseError, ValidationError
from shared.test_helpers import CatalogDataFactory


class TestObjectType:
    """Object classification mapping."""

    @pytest.mark.parametrize(
        "wire, expected",
        [
            ("ROCKET BODY", ObjectType.ROCKET_BODY),
            ("PAYLOAD", ObjectType.PAYLOAD),
            ("DEBRIS", ObjectType.DEBRIS),
            ("UNKNOWN", ObjectType.UNKNOWN),
        ],
    )
    def test_known_wire_values(self, wire, expected):
        assert ObjectType.from_wire(wire) is expected

    @pytest.mark.parametrize("wire", ["UNKNOWN_FUTURE_TYPE", "payload", "", None, 7])
    def test_unrecognised_values_map_to_unknown(self, wire):
        assert ObjectType.from_wire(wire) is ObjectType.UNKNOWN

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Payload", ObjectType.PAYLOAD),
            ("rocketbody", ObjectType.ROCKET_BODY),
            ("ROCKET BODY", ObjectType.ROCKET_BODY),
            ("rocket_body", ObjectType.ROCKET_BODY),
            (" debris ", ObjectType.DEBRIS),
        ],
    )
    def test_parse_public_and_wire_names(self, name, expected):
        assert ObjectType.parse(name) is expected

    def test_parse_rejects_unknown_names(self):
        with pytest.raises(ValidationError) as exc_info:
            ObjectType.parse("asteroid")

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.details["object_type"] == "asteroid"


class TestTrackedObject:
    """Parsing of Space-Track satcat records."""

    def test_parses_numeric_strings(self):
        record = CatalogDataFactory.record(
            "25544", "ISS (ZARYA)", launch="1998-11-20", orbit=("92.80", "51.64", "423", "418")
        )

        tracked = TrackedObject.from_wire(record)

        assert tracked.object_id == 25544
        assert tracked.object_type is ObjectType.PAYLOAD
        assert tracked.name == "ISS (ZARYA)"
        assert tracked.launch == "1998-11-20"
        assert tracked.decay is None
        assert tracked.orbit == OrbitSummary(period=92.8, inclination=51.64, apogee=423.0, perigee=418.0)

    def test_parses_native_numbers(self):
        record = CatalogDataFactory.record(5, "VANGUARD 1", orbit=(132.7, 34.25, 3832, 651))

        tracked = TrackedObject.from_wire(record)

        assert tracked.object_id == 5
        assert tracked.orbit.apogee == pytest.approx(3832.0)

    def test_orbit_requires_all_four_fields(self):
        record = CatalogDataFactory.record("43205", "FALCON 9 R/B", object_type="ROCKET BODY", decay="2018-02-13")
        record.update(PERIOD="90.1", INCLINATION="28.5", APOGEE=None)

        tracked = TrackedObject.from_wire(record)

        assert tracked.orbit is None
        assert tracked.decay == "2018-02-13"
        assert tracked.object_type is ObjectType.ROCKET_BODY

    def test_unknown_object_type_does_not_fail_ingestion(self):
        record = CatalogDataFactory.record("99999", "MYSTERY OBJECT", object_type="UNKNOWN_FUTURE_TYPE")

        tracked = TrackedObject.from_wire(record)

        assert tracked.object_type is ObjectType.UNKNOWN
        assert tracked.object_id == 99999

    @pytest.mark.parametrize("object_id", [None, "", "ISS", "12a", -4, 0, True, 1.5])
    def test_rejects_malformed_ids(self, object_id):
        with pytest.raises(ParseError):
            TrackedObject.from_wire(CatalogDataFactory.record(object_id, "BAD"))

    @pytest.mark.parametrize(
        "orbit",
        [("ninety", "51", "400", "390"), ("", "51.64", "423", "418"), (92.8, True, 423, 418)],
    )
    def test_malformed_orbit_keeps_object_without_summary(self, orbit):
        record = CatalogDataFactory.record("25544", "ISS (ZARYA)", orbit=orbit)

        tracked = TrackedObject.from_wire(record)

        assert tracked.object_id == 25544
        assert tracked.name == "ISS (ZARYA)"
        assert tracked.orbit is None
        assert "PERIOD" not in tracked.to_dict()

    def test_rejects_missing_name(self):
        record = CatalogDataFactory.record("1", "X")
        del record["OBJECT_NAME"]

        with pytest.raises(ParseError):
            TrackedObject.from_wire(record)

    def test_rejects_non_object_records(self):
        with pytest.raises(ParseError):
            TrackedObject.from_wire(["25544", "ISS"])

    def test_to_dict_uses_remote_field_names(self):
        tracked = TrackedObject.from_wire(
            CatalogDataFactory.record("25544", "ISS (ZARYA)", launch="1998-11-20", orbit=(92.8, 51.64, 423, 418))
        )

        assert tracked.to_dict() == {
            "NORAD_CAT_ID": 25544,
            "OBJECT_TYPE": "Payload",
            "OBJECT_NAME": "ISS (ZARYA)",
            "LAUNCH": "1998-11-20",
            "DECAY": None,
            "PERIOD": 92.8,
            "INCLINATION": 51.64,
            "APOGEE": 423.0,
            "PERIGEE": 418.0,
        }

    def test_to_dict_omits_absent_orbit(self):
        tracked = TrackedObject.from_wire(CatalogDataFactory.record("34454", "COSMOS 2251 DEB", object_type="DEBRIS"))

        payload = tracked.to_dict()

        assert "PERIOD" not in payload
        assert payload["OBJECT_TYPE"] == "Debris"
