"""Property-based tests for the settings store.

Tests the read/write invariants of the store using Hypothesis for
automatic test case generation.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from torrconf.models import StoreOptions
from torrconf.storage.store import SettingsStore

pytestmark = pytest.mark.property

bucket_names = st.text(
    alphabet=st.characters(blacklist_characters="/\x00", blacklist_categories=("Cs",)),
    min_size=1,
    max_size=12,
)
paths = st.lists(bucket_names, min_size=1, max_size=3).map("/".join)
names = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=24)
values = st.binary(max_size=2048)
any_text = st.text(alphabet=st.characters(blacklist_categories=()), max_size=16)


@pytest.fixture(scope="module")
def shared_store():
    """One store reused across generated examples."""
    with tempfile.TemporaryDirectory() as tmp:
        db = SettingsStore.open(StoreOptions(data_dir=Path(tmp)))
        yield db
        db.close()


class TestStoreProperties:
    """Property-based tests for store operations."""

    @given(path=paths, name=names, value=values)
    @settings(max_examples=60, deadline=None)
    def test_set_then_get(self, shared_store, path, name, value):
        """A written value reads back byte-equal."""
        shared_store.set(path, name, value)
        assert shared_store.get(path, name) == value

    @given(path=paths, name=names, first=values, second=values)
    @settings(max_examples=40, deadline=None)
    def test_last_write_wins(self, shared_store, path, name, first, second):
        """The second write replaces the first."""
        shared_store.set(path, name, first)
        shared_store.set(path, name, second)
        assert shared_store.get(path, name) == second

    @given(path=paths, name=names, value=values)
    @settings(max_examples=40, deadline=None)
    def test_remove(self, shared_store, path, name, value):
        """A removed key is absent."""
        shared_store.set(path, name, value)
        shared_store.remove(path, name)
        assert shared_store.get(path, name) is None

    @given(path=paths, entries=st.dictionaries(names, values, min_size=1, max_size=5))
    @settings(max_examples=40, deadline=None)
    def test_clear(self, shared_store, path, entries):
        """A cleared bucket has no keys left."""
        for name, value in entries.items():
            shared_store.set(path, name, value)
        assert set(entries) <= set(shared_store.list_keys(path))
        shared_store.clear(path)
        assert shared_store.list_keys(path) == []
        for name in entries:
            assert shared_store.get(path, name) is None

    @given(path=paths, name=names, value=st.binary(min_size=1, max_size=256))
    @settings(max_examples=30, deadline=None)
    def test_get_is_independent_copy(self, shared_store, path, name, value):
        """Mutating a copy of the result never changes the stored bytes."""
        shared_store.set(path, name, value)
        result = shared_store.get(path, name)
        assert isinstance(result, bytes)
        scratch = bytearray(result)
        scratch[0] ^= 0xFF
        assert shared_store.get(path, name) == value

    @given(path=any_text, name=any_text, value=values)
    @settings(max_examples=60, deadline=None)
    def test_any_text_never_raises(self, shared_store, path, name, value):
        """Unusable paths and names, lone surrogates included, are absorbed."""
        shared_store.set(path, name, value)
        result = shared_store.get(path, name)
        assert result is None or result == value
        shared_store.list_keys(path)
        shared_store.remove(path, name)
        shared_store.clear(path)
