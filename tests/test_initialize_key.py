"""
Unit tests for initialize_key - per-key orchestration at open()

Covers every transition of the per-key state machine:
- Absent -> default at target version
- Present, equal version -> unchanged, zero writes
- Present, older -> migrated and committed
- Present, newer -> reset / ignore / rollback / custom
- Failures leave storage untouched
"""

import asyncio
import json
import unittest
from pathlib import Path
from unittest.mock import AsyncMock

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from persephone.errors import MigrationError, SerializationError
from persephone.migrations import Migration, version_key_for
from persephone.migrations.engine import (
    InitOutcome,
    initialize_key,
    initialize_key_detailed,
)
from persephone.schema import ReconciliationPolicy, Schema
from persephone.storage import MemoryAdapter


def _stored(value, version=None):
    """Raw store contents for one key 'k'."""
    data = {"k": json.dumps(value)}
    if version is not None:
        data[version_key_for("k")] = json.dumps({"version": version})
    return data


class TestInitializeKey(unittest.IsolatedAsyncioTestCase):
    """Test suite for initialize_key."""

    # ==================== Absent data ====================

    async def test_absent_value_returns_default_and_records_version(self):
        store = MemoryAdapter()
        schema = Schema(version=1, default=[])

        value = await initialize_key(store, "k", schema)

        self.assertEqual(value, [])
        self.assertEqual(store.snapshot(), {version_key_for("k"): '{"version": 1}'})

    async def test_absent_value_runs_no_migrations(self):
        migrate = AsyncMock(return_value="never")
        store = MemoryAdapter()
        schema = Schema(version=3, default="d", migrations=[Migration(2, migrate)])

        result = await initialize_key_detailed(store, "k", schema)

        self.assertEqual(result.outcome, InitOutcome.DEFAULTED)
        self.assertEqual(result.value, "d")
        migrate.assert_not_called()
        self.assertNotIn("k", store.snapshot())

    async def test_empty_string_counts_as_absent(self):
        """An empty stored value starts fresh, like a missing one."""
        store = MemoryAdapter({"k": "", version_key_for("k"): '{"version": 1}'})
        schema = Schema(version=3, default=["d"], migrations=[Migration(2, lambda d: 1 / 0)])

        result = await initialize_key_detailed(store, "k", schema)

        self.assertEqual(result.outcome, InitOutcome.DEFAULTED)
        self.assertEqual(result.value, ["d"])
        self.assertEqual(json.loads(store.snapshot()[version_key_for("k")]), {"version": 3})

    # ==================== Current data ====================

    async def test_current_version_is_returned_without_writes(self):
        store = MemoryAdapter(_stored({"a": 1}, version=2))
        store.set_item = AsyncMock(wraps=store.set_item)
        schema = Schema(version=2, default={})

        result = await initialize_key_detailed(store, "k", schema)

        self.assertEqual(result.outcome, InitOutcome.UNCHANGED)
        self.assertEqual(result.value, {"a": 1})
        self.assertFalse(result.written)
        store.set_item.assert_not_called()

    # ==================== Older data ====================

    async def test_older_version_is_migrated_and_committed(self):
        store = MemoryAdapter(_stored(["buy milk"], version=1))
        schema = Schema(
            version=2,
            default=[],
            migrations=[Migration(2, lambda todos: [{"title": t} for t in todos])],
        )

        result = await initialize_key_detailed(store, "k", schema)

        self.assertEqual(result.outcome, InitOutcome.MIGRATED)
        self.assertEqual(result.value, [{"title": "buy milk"}])
        self.assertTrue(result.written)
        snapshot = store.snapshot()
        self.assertEqual(json.loads(snapshot["k"]), [{"title": "buy milk"}])
        self.assertEqual(json.loads(snapshot[version_key_for("k")]), {"version": 2})

    async def test_unversioned_legacy_data_starts_at_zero(self):
        store = MemoryAdapter(_stored("legacy"))
        seen = []
        schema = Schema(
            version=1,
            default=None,
            migrations=[Migration(1, lambda d: seen.append(d) or d.upper())],
        )

        value = await initialize_key(store, "k", schema)

        self.assertEqual(seen, ["legacy"])
        self.assertEqual(value, "LEGACY")

    async def test_corrupt_version_record_is_treated_as_legacy(self):
        store = MemoryAdapter({"k": '"v"', version_key_for("k"): "{not json"})
        schema = Schema(version=2, default=None, migrations=[Migration(1, lambda d: d + "1")])

        value = await initialize_key(store, "k", schema)

        self.assertEqual(value, "v1")
        self.assertEqual(await store.get_item(version_key_for("k")), '{"version": 2}')

    async def test_failed_migration_leaves_store_unchanged(self):
        def g(_):
            raise RuntimeError("boom")

        original = _stored(["x"], version=1)
        store = MemoryAdapter(original)
        schema = Schema(
            version=5,
            default=[],
            migrations=[
                Migration(2, lambda d: d + ["f"]),
                Migration(3, g),
                Migration(5, lambda d: d + ["h"]),
            ],
        )

        with self.assertRaises(MigrationError) as context:
            await initialize_key(store, "k", schema)

        self.assertEqual(store.snapshot(), original)
        self.assertEqual(context.exception.key, "k")
        self.assertEqual(context.exception.from_version, 1)
        self.assertEqual(context.exception.to_version, 3)

    async def test_undecodable_value_raises_without_writes(self):
        original = {"k": "{broken", version_key_for("k"): '{"version": 1}'}
        store = MemoryAdapter(original)
        schema = Schema(version=2, default=None)

        with self.assertRaises(SerializationError) as context:
            await initialize_key(store, "k", schema)

        self.assertEqual(context.exception.key, "k")
        self.assertEqual(store.snapshot(), original)

    # ==================== Newer data ====================

    async def test_newer_version_reset_uses_default(self):
        store = MemoryAdapter(_stored({"future": True}, version=7))
        schema = Schema(version=3, default={"fresh": True}, reconciliation="reset")

        result = await initialize_key_detailed(store, "k", schema)

        self.assertEqual(result.outcome, InitOutcome.RESET)
        self.assertEqual(result.value, {"fresh": True})
        self.assertEqual(json.loads(store.snapshot()["k"]), {"fresh": True})
        self.assertEqual(json.loads(store.snapshot()[version_key_for("k")]), {"version": 3})

    async def test_newer_version_ignore_returns_none_without_writes(self):
        original = _stored({"future": True}, version=7)
        store = MemoryAdapter(original)
        store.set_item = AsyncMock(wraps=store.set_item)
        schema = Schema(version=3, default={}, reconciliation=ReconciliationPolicy.IGNORE)

        value = await initialize_key(store, "k", schema)

        self.assertIsNone(value)
        store.set_item.assert_not_called()
        self.assertEqual(store.snapshot(), original)

    async def test_newer_version_migrate_rolls_back(self):
        store = MemoryAdapter(_stored({"a": 1, "b": 2}, version=3))
        schema = Schema(
            version=2,
            default={},
            migrations=[
                Migration(2, lambda d: {**d, "a": 1}),
                Migration(
                    3,
                    lambda d: {**d, "b": 2},
                    rollback=lambda d: {k: v for k, v in d.items() if k != "b"},
                ),
            ],
        )

        result = await initialize_key_detailed(store, "k", schema)

        self.assertEqual(result.outcome, InitOutcome.ROLLED_BACK)
        self.assertEqual(result.value, {"a": 1})
        self.assertEqual(json.loads(store.snapshot()[version_key_for("k")]), {"version": 2})

    async def test_newer_version_migrate_without_rollback_fails_cleanly(self):
        original = _stored("data", version=4)
        store = MemoryAdapter(original)
        schema = Schema(version=2, default="", migrations=[Migration(3, lambda d: d)])

        with self.assertRaises(MigrationError):
            await initialize_key(store, "k", schema)

        self.assertEqual(store.snapshot(), original)

    async def test_newer_version_from_newer_code_is_not_relabelled(self):
        """Data written by a newer release whose steps this schema never declared."""
        original = _stored({"v5": "shape"}, version=5)
        store = MemoryAdapter(original)
        schema = Schema(
            version=3,
            default={},
            migrations=[Migration(2, lambda d: d), Migration(3, lambda d: d)],
        )

        with self.assertRaises(MigrationError) as context:
            await initialize_key(store, "k", schema)

        self.assertEqual(context.exception.from_version, 5)
        self.assertEqual(store.snapshot(), original)

    async def test_failing_custom_handler_is_wrapped(self):
        def handler(data, from_version, to_version):
            raise KeyError("shape")

        original = _stored({"n": 1}, version=4)
        store = MemoryAdapter(original)
        schema = Schema(version=2, default={}, reconciliation=handler)

        with self.assertRaises(MigrationError) as context:
            await initialize_key(store, "k", schema)

        self.assertEqual(context.exception.key, "k")
        self.assertEqual(context.exception.from_version, 4)
        self.assertEqual(context.exception.to_version, 2)
        self.assertIsInstance(context.exception.__cause__, KeyError)
        self.assertEqual(store.snapshot(), original)

    async def test_newer_version_custom_handler_result_is_committed(self):
        calls = []

        async def handler(data, from_version, to_version):
            await asyncio.sleep(0)
            calls.append((data, from_version, to_version))
            return {"downgraded": data["n"]}

        store = MemoryAdapter(_stored({"n": 42}, version=9))
        schema = Schema(version=4, default={}, reconciliation=handler)

        result = await initialize_key_detailed(store, "k", schema)

        self.assertEqual(calls, [({"n": 42}, 9, 4)])
        self.assertEqual(result.outcome, InitOutcome.CUSTOM)
        self.assertEqual(json.loads(store.snapshot()["k"]), {"downgraded": 42})

    async def test_sync_custom_handler(self):
        store = MemoryAdapter(_stored(1, version=2))
        schema = Schema(version=1, default=0, reconciliation=lambda d, f, t: d * 10)

        value = await initialize_key(store, "k", schema)

        self.assertEqual(value, 10)

    # ==================== Codec overrides ====================

    async def test_schema_codec_is_used_for_read_and_write_back(self):
        store = MemoryAdapter({"k": "a,b", version_key_for("k"): '{"version": 1}'})
        schema = Schema(
            version=2,
            default=[],
            migrations=[Migration(2, lambda items: items + ["c"])],
            serialize=lambda items: ",".join(items),
            deserialize=lambda text: text.split(","),
        )

        value = await initialize_key(store, "k", schema)

        self.assertEqual(value, ["a", "b", "c"])
        self.assertEqual(store.snapshot()["k"], "a,b,c")


if __name__ == "__main__":
    unittest.main()
