"""Tests for catalog loading and validation."""

import json
import tempfile
import unittest
import sys
from pathlib import Path

# Add src to path so we can import tubespotter
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tubespotter.catalog import Catalog, parse_status_record, read_records
from tubespotter.exceptions import LoadError, MalformedRecord
from tubespotter.models import Coordinate, LineId, Status

STATIONS = [
    {"name": "Oxford Circus", "latitude": "51.515", "longitude": "-0.1415"},
    {"Station": "Bond Street", "Latitude": "51.5142", "Longitude": "-0.1494"},
]
ASSOCIATIONS = [
    {"line": "Bakerloo", "fromStation": "Oxford Circus", "toStation": "Piccadilly Circus"},
    {"Tube Line": "Central", "From Station": "Oxford Circus", "To Station": "Tottenham Court Road"},
    {"line": "Victoria", "fromStation": "Oxford Circus", "toStation": "Green Park"},
]
STATUS_FEED = [
    {
        "id": "victoria",
        "name": "Victoria",
        "modeName": "tube",
        "lineStatuses": [{"statusSeverity": 10, "statusSeverityDescription": "Good Service"}],
    },
    {
        "id": "central",
        "name": "Central",
        "modeName": "tube",
        "lineStatuses": [{"severity": 3, "severityDescription": "Part Closure"}],
    },
]


class TestCatalogLoad(unittest.TestCase):
    """Test building a catalog from raw records."""

    def setUp(self):
        self.catalog = Catalog.load(STATIONS, ASSOCIATIONS, STATUS_FEED)

    def test_stations_parsed(self):
        self.assertEqual(len(self.catalog.stations), 2)
        station = self.catalog.get_station("Bond Street")
        self.assertEqual(station.coordinate, Coordinate(51.5142, -0.1494))
        self.assertAlmostEqual(self.catalog.get_station("Oxford Circus").latitude, 51.515)

    def test_associations_parsed(self):
        lines = [a.line for a in self.catalog.associations]
        self.assertEqual(lines, [LineId.BAKERLOO, LineId.CENTRAL, LineId.VICTORIA])
        self.assertEqual(self.catalog.associations[1].to_station, "Tottenham Court Road")

    def test_statuses_indexed_by_id(self):
        victoria = self.catalog.status_record("victoria")
        self.assertEqual(victoria.mode_name, "tube")
        self.assertEqual(victoria.current.severity, 10)
        self.assertEqual(victoria.current.severity_description, "Good Service")
        self.assertIsNone(self.catalog.status_record("jubilee"))

    def test_resolve(self):
        self.assertEqual(
            self.catalog.resolve("Oxford Circus"),
            [
                (LineId.BAKERLOO, None),
                (LineId.CENTRAL, Status.NOT_RUNNING),
                (LineId.VICTORIA, Status.GOOD),
            ],
        )

    def test_read_only(self):
        with self.assertRaises(TypeError):
            self.catalog.statuses["jubilee"] = None

    def test_get_station_not_found(self):
        with self.assertRaises(ValueError):
            self.catalog.get_station("Nowhere")

    def test_find_stations_by_name(self):
        self.assertEqual([s.name for s in self.catalog.find_stations_by_name("circus")], ["Oxford Circus"])
        self.assertEqual(len(self.catalog.find_stations_by_name("o")), 2)

    def test_with_statuses(self):
        refreshed = self.catalog.with_statuses(
            [{"id": "central", "lineStatuses": [{"statusSeverity": 10}]}]
        )
        self.assertIs(refreshed.stations, self.catalog.stations)
        self.assertEqual(refreshed.resolve("Oxford Circus")[1], (LineId.CENTRAL, Status.GOOD))
        # The original catalog is untouched
        self.assertEqual(self.catalog.resolve("Oxford Circus")[1], (LineId.CENTRAL, Status.NOT_RUNNING))

    def test_models_pass_through(self):
        catalog = Catalog.load(self.catalog.stations, self.catalog.associations, self.catalog.statuses.values())
        self.assertEqual(catalog.resolve("Oxford Circus"), self.catalog.resolve("Oxford Circus"))


class TestCatalogValidation(unittest.TestCase):
    """Test rejection of malformed records."""

    def test_non_numeric_coordinate(self):
        stations = STATIONS + [{"name": "Bank", "latitude": "51.51x", "longitude": "-0.08"}]
        with self.assertRaises(MalformedRecord) as ctx:
            Catalog.load(stations, ASSOCIATIONS)
        self.assertEqual(ctx.exception.kind, "station")
        self.assertEqual(ctx.exception.index, 2)
        self.assertIsInstance(ctx.exception, LoadError)

    def test_missing_coordinate(self):
        with self.assertRaises(MalformedRecord):
            Catalog.load([{"name": "Bank", "latitude": "51.51"}], [])

    def test_non_finite_coordinate(self):
        with self.assertRaises(MalformedRecord):
            Catalog.load([{"name": "Bank", "latitude": "nan", "longitude": "-0.08"}], [])

    def test_unknown_line(self):
        associations = [{"line": "Crossrail 2", "fromStation": "Oxford Circus", "toStation": "Bank"}]
        with self.assertRaises(MalformedRecord) as ctx:
            Catalog.load(STATIONS, associations)
        self.assertEqual(ctx.exception.kind, "association")
        self.assertIn("Crossrail 2", str(ctx.exception))

    def test_duplicate_station_name(self):
        with self.assertRaises(MalformedRecord):
            Catalog.load(STATIONS + [STATIONS[0]], [])

    def test_status_record_without_id(self):
        with self.assertRaises(MalformedRecord):
            Catalog.load(STATIONS, ASSOCIATIONS, [{"name": "Victoria", "lineStatuses": []}])

    def test_non_integer_severity(self):
        with self.assertRaises(MalformedRecord):
            parse_status_record({"id": "victoria", "lineStatuses": [{"statusSeverity": "good"}]})
        with self.assertRaises(MalformedRecord):
            parse_status_record({"id": "victoria", "lineStatuses": [{"statusSeverity": 9.5}]})

    def test_record_not_an_object(self):
        for station in (None, 42, "Oxford Circus"):
            with self.assertRaises(MalformedRecord) as ctx:
                Catalog.load(STATIONS + [station], [])
            self.assertEqual(ctx.exception.kind, "station")
            self.assertEqual(ctx.exception.index, 2)
        with self.assertRaises(MalformedRecord) as ctx:
            Catalog.load(STATIONS, [None])
        self.assertEqual(ctx.exception.kind, "association")
        with self.assertRaises(MalformedRecord) as ctx:
            Catalog.load(STATIONS, ASSOCIATIONS, ["victoria"])
        self.assertEqual(ctx.exception.kind, "status")

    def test_status_entry_not_an_object(self):
        with self.assertRaises(MalformedRecord):
            parse_status_record({"id": "victoria", "lineStatuses": ["Good Service"]})
        with self.assertRaises(MalformedRecord):
            parse_status_record({"id": "victoria", "lineStatuses": "Good Service"})

    def test_null_station_name(self):
        with self.assertRaises(MalformedRecord):
            Catalog.load([{"name": None, "latitude": "51.5", "longitude": "-0.1"}], [])

    def test_null_association_fields(self):
        for field in ("line", "fromStation", "toStation"):
            association = dict(ASSOCIATIONS[0])
            association[field] = None
            with self.assertRaises(MalformedRecord) as ctx:
                Catalog.load(STATIONS, [association])
            self.assertEqual(ctx.exception.kind, "association")

    def test_non_string_status_id(self):
        with self.assertRaises(MalformedRecord):
            parse_status_record({"id": 7, "lineStatuses": []})

    def test_status_record_without_entries(self):
        record = parse_status_record({"id": "dlr", "name": "DLR", "modeName": "dlr"})
        self.assertIsNone(record.current)


class TestReadRecords(unittest.TestCase):
    """Test reading data files."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_csv(self):
        path = self.tmp / "stations.csv"
        path.write_text(
            "Station,Latitude,Longitude\n"
            "Oxford Circus,51.515,-0.1415\n"
            "Bond Street,51.5142,-0.1494\n",
            encoding="utf-8",
        )
        records = read_records(path)
        self.assertEqual(records[0], {"Station": "Oxford Circus", "Latitude": "51.515", "Longitude": "-0.1415"})

    def test_json(self):
        path = self.tmp / "lines.json"
        path.write_text(json.dumps(ASSOCIATIONS), encoding="utf-8")
        self.assertEqual(read_records(path), ASSOCIATIONS)

    def test_json_must_be_list(self):
        path = self.tmp / "lines.json"
        path.write_text(json.dumps({"line": "Victoria"}), encoding="utf-8")
        with self.assertRaises(LoadError):
            read_records(path)

    def test_missing_file(self):
        with self.assertRaises(LoadError):
            read_records(self.tmp / "missing.json")
        with self.assertRaises(LoadError):
            read_records(self.tmp / "missing.csv")

    def test_invalid_json(self):
        path = self.tmp / "stations.json"
        path.write_text("[{oops", encoding="utf-8")
        with self.assertRaises(LoadError):
            read_records(path)

    def test_invalid_csv(self):
        path = self.tmp / "stations.csv"
        path.write_text(
            "Station,Latitude,Longitude\n"
            "Oxford Circus,51.515,-0.1415\n"
            "Bond Street,51.5142,-0.1494,extra,fields\n",
            encoding="utf-8",
        )
        with self.assertRaises(LoadError):
            read_records(path)

    def test_unsupported_type(self):
        with self.assertRaises(LoadError):
            read_records(self.tmp / "stations.xml")

    def test_from_files(self):
        stations_path = self.tmp / "stations.csv"
        stations_path.write_text("Station,Latitude,Longitude\nOxford Circus,51.515,-0.1415\n", encoding="utf-8")
        lines_path = self.tmp / "lines.json"
        lines_path.write_text(json.dumps(ASSOCIATIONS), encoding="utf-8")

        catalog = Catalog.from_files(stations_path, lines_path, STATUS_FEED)
        self.assertEqual(catalog.get_station("Oxford Circus").longitude, -0.1415)
        self.assertEqual(len(catalog.resolve("Oxford Circus")), 3)

    def test_from_files_bad_coordinate(self):
        stations_path = self.tmp / "stations.csv"
        stations_path.write_text("Station,Latitude,Longitude\nOxford Circus,,-0.1415\n", encoding="utf-8")
        lines_path = self.tmp / "lines.json"
        lines_path.write_text("[]", encoding="utf-8")
        with self.assertRaises(MalformedRecord):
            Catalog.from_files(stations_path, lines_path)


if __name__ == "__main__":
    unittest.main()
