"""Property-based tests for git output parsing."""

from hypothesis import given, strategies as st

from reposync.repository import parse_changed_paths, parse_overwritten_paths

_PATH_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789-_./ "

paths = st.text(alphabet=_PATH_ALPHABET, min_size=1, max_size=20).filter(
    lambda p: p.strip() == p and p.strip()
)
plain_codes = st.sampled_from([" M", "M ", "MM", "A ", " D", "D ", "??", "UU", "AM"])
rename_codes = st.sampled_from(["R ", "RM", "C ", " R"])

entries = st.one_of(
    st.tuples(plain_codes, paths, st.none()),
    st.tuples(rename_codes, paths, paths),
)


def _porcelain(records: list[tuple[str, str, str | None]]) -> str:
    fields: list[str] = []
    for code, path, source in records:
        fields.append(f"{code} {path}")
        if source is not None:
            fields.append(source)
    return "".join(f"{field}\0" for field in fields)


class TestChangedPathsProperties:
    @given(records=st.lists(entries, max_size=15))
    def test_counts_destination_paths_once(
        self, records: list[tuple[str, str, str | None]]
    ) -> None:
        assert parse_changed_paths(_porcelain(records)) == {
            path for _code, path, _source in records
        }

    def test_empty_output(self) -> None:
        assert parse_changed_paths("") == frozenset()


class TestOverwrittenPathsProperties:
    @given(listed=st.lists(paths, min_size=1, max_size=10))
    def test_paths_kept_in_order_without_duplicates(self, listed: list[str]) -> None:
        output = "\n".join(
            [
                "error: Your local changes to the following files would be "
                "overwritten by checkout:",
                *(f"\t{path}" for path in listed),
                "Please commit your changes or stash them before you switch branches.",
                "Aborting",
            ]
        )
        assert parse_overwritten_paths(output) == tuple(dict.fromkeys(listed))
