from rdslogs.core.listing import filter_log_file_names, list_log_file_names
from rdslogs.core.logfiles import LogFormat

FILES = [
    "postgresql.log.2024-01-02-03",
    "postgresql.log.2024-01-02-03.csv",
    "postgresql.log.2024-01-02-04",
    "postgresql.log.2024-01-02-04.csv",
    "postgresql.log.2024-01-01",
]


class _Lister:
    def __init__(self, files, structured):
        self.files = files
        self.structured = structured

    def list_file_names(self):
        return list(self.files)

    def structured_output_enabled(self):
        return self.structured


def test_filter_keeps_one_format_newest_first():
    assert filter_log_file_names(FILES, LogFormat.PLAIN) == [
        "postgresql.log.2024-01-02-04",
        "postgresql.log.2024-01-02-03",
        "postgresql.log.2024-01-01",
    ]
    assert filter_log_file_names(FILES, LogFormat.STRUCTURED) == [
        "postgresql.log.2024-01-02-04.csv",
        "postgresql.log.2024-01-02-03.csv",
    ]


def test_list_uses_structured_when_preferred_and_enabled():
    listing = list_log_file_names(_Lister(FILES, structured=True), prefer_structured=True)

    assert listing.log_format == LogFormat.STRUCTURED
    assert all(n.endswith(".csv") for n in listing.names)


def test_list_falls_back_to_plain_when_instance_has_no_csvlog():
    listing = list_log_file_names(_Lister(FILES, structured=False), prefer_structured=True)

    assert listing.log_format == LogFormat.PLAIN
    assert not any(n.endswith(".csv") for n in listing.names)


def test_list_uses_plain_when_not_preferred():
    listing = list_log_file_names(_Lister(FILES, structured=True), prefer_structured=False)

    assert listing.log_format == LogFormat.PLAIN
    assert len(listing.names) == 3
