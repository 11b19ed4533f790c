"""
Tests for schema declarations, migration steps and the migration registry
"""
import pytest

from persephone.errors import DuplicateMigrationError, SchemaError
from persephone.migrations import Migration, MigrationRegistry
from persephone.schema import Reconciliation, ReconciliationPolicy, Schema


def identity(data):
    return data


class TestMigration:
    """Tests for Migration steps."""

    def test_version_must_be_positive(self):
        with pytest.raises(ValueError, match="must be >= 1"):
            Migration(0, identity)

    def test_version_must_be_int(self):
        with pytest.raises(ValueError):
            Migration("2", identity)
        with pytest.raises(ValueError):
            Migration(True, identity)

    def test_migrate_must_be_callable(self):
        with pytest.raises(ValueError):
            Migration(1, "not callable")

    def test_ordering_and_equality(self):
        a, b = Migration(2, identity), Migration(5, identity)

        assert a < b
        assert sorted([b, a]) == [a, b]
        assert Migration(2, identity) == a
        assert len({a, Migration(2, identity)}) == 1

    def test_repr(self):
        assert repr(Migration(3, identity)) == "<Migration v3>"
        assert repr(Migration(3, identity, description="add owner")) == "<Migration v3: add owner>"

    def test_reversible(self):
        assert not Migration(1, identity).reversible
        assert Migration(1, identity, rollback=identity).reversible


class TestMigrationRegistry:
    """Tests for MigrationRegistry."""

    def _registry(self):
        return MigrationRegistry([
            Migration(5, identity),
            Migration(2, identity),
            Migration(3, identity),
        ])

    def test_sorted(self):
        assert [m.version for m in self._registry().get_all_migrations()] == [2, 3, 5]

    def test_duplicate_version_rejected(self):
        registry = self._registry()

        with pytest.raises(DuplicateMigrationError) as exc_info:
            registry.register(Migration(3, identity))

        assert exc_info.value.version == 3

    def test_register_requires_migration(self):
        with pytest.raises(TypeError):
            MigrationRegistry().register({"version": 1})

    def test_pending_range(self):
        registry = self._registry()

        assert [m.version for m in registry.get_pending_migrations(1, 5)] == [2, 3, 5]
        assert [m.version for m in registry.get_pending_migrations(2, 3)] == [3]
        assert registry.get_pending_migrations(5, 5) == []
        assert registry.get_pending_migrations(5, 2) == []

    def test_rollback_range(self):
        registry = self._registry()

        assert [m.version for m in registry.get_rollback_migrations(5, 2)] == [5, 3]
        assert registry.get_rollback_migrations(2, 5) == []

    def test_latest_and_counts(self):
        registry = self._registry()

        assert registry.get_latest_version() == 5
        assert registry.has_migrations()
        assert len(registry) == 3
        assert registry.get_migration(3).version == 3
        assert registry.get_migration(4) is None
        assert MigrationRegistry().get_latest_version() == 0
        assert repr(registry) == "<MigrationRegistry: 3 migrations, latest v5>"


class TestReconciliation:
    """Tests for reconciliation policy normalization."""

    def test_default_is_migrate(self):
        assert Schema(version=1).reconciliation.policy is ReconciliationPolicy.MIGRATE

    @pytest.mark.parametrize("value, policy", [
        ("migrate", ReconciliationPolicy.MIGRATE),
        ("reset", ReconciliationPolicy.RESET),
        ("ignore", ReconciliationPolicy.IGNORE),
        (ReconciliationPolicy.RESET, ReconciliationPolicy.RESET),
    ])
    def test_named_policies(self, value, policy):
        assert Schema(version=1, reconciliation=value).reconciliation.policy is policy

    def test_callable_becomes_custom(self):
        def handler(data, from_version, to_version):
            return data

        reconciliation = Schema(version=1, reconciliation=handler).reconciliation

        assert reconciliation.policy is ReconciliationPolicy.CUSTOM
        assert reconciliation.handler is handler

    def test_unknown_policy(self):
        with pytest.raises(SchemaError):
            Schema(version=1, reconciliation="downgrade")

    def test_custom_without_handler(self):
        with pytest.raises(SchemaError):
            Schema(version=1, reconciliation="custom")
        with pytest.raises(SchemaError):
            Reconciliation(ReconciliationPolicy.CUSTOM)

    def test_invalid_type(self):
        with pytest.raises(SchemaError):
            Schema(version=1, reconciliation=42)


class TestSchema:
    """Tests for Schema validation."""

    def test_version_must_be_positive(self):
        with pytest.raises(SchemaError):
            Schema(version=0)

    def test_version_must_be_int(self):
        with pytest.raises(SchemaError):
            Schema(version="1")

    def test_duplicate_migrations_rejected_at_declaration(self):
        with pytest.raises(DuplicateMigrationError):
            Schema(version=3, migrations=[Migration(2, identity), Migration(2, identity)])

    def test_migrations_are_sorted(self):
        schema = Schema(version=3, migrations=[Migration(3, identity), Migration(1, identity)])
        assert [m.version for m in schema.migrations] == [1, 3]

    def test_make_default_copies(self):
        schema = Schema(version=1, default={"items": []})

        value = schema.make_default()
        value["items"].append(1)

        assert schema.default == {"items": []}

    def test_codec_hooks_must_be_callable(self):
        with pytest.raises(SchemaError):
            Schema(version=1, serialize="json")

    def test_from_dict(self):
        schema = Schema.from_dict({
            "version": 2,
            "default": [],
            "migrations": [{"version": 2, "migrate": identity}],
            "reconciliation": "reset",
        })

        assert schema.version == 2
        assert schema.migrations[0].version == 2
        assert schema.reconciliation.policy is ReconciliationPolicy.RESET

    def test_from_dict_requires_version(self):
        with pytest.raises(SchemaError):
            Schema.from_dict({"default": 1})
