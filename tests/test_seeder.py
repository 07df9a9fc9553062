"""Tests for the Seeder orchestrator."""

import threading
from typing import Any

import pytest
from faker import Faker

from prisma_seed import MemorySink, Seeder, SeederConfig
from prisma_seed.exceptions import ModelNotFoundError, SchemaReadError, SinkError


class FlakySink(MemorySink):
    """Memory sink rejecting every third create call."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def create(self, model: str, record: dict[str, Any]) -> Any:
        self.calls += 1
        if self.calls % 3 == 0:
            raise SinkError(model, "simulated constraint violation")
        return super().create(model, record)


class RejectFirstSink(MemorySink):
    """Memory sink rejecting only its first create call."""

    def __init__(self):
        super().__init__()
        self.rejected = False

    def create(self, model: str, record: dict[str, Any]) -> Any:
        if not self.rejected:
            self.rejected = True
            raise SinkError(model, "simulated deadlock")
        return super().create(model, record)


class ExplodingSink(MemorySink):
    """Memory sink raising a non-sink exception for one model."""

    def create(self, model: str, record: dict[str, Any]) -> Any:
        if model == "User":
            raise RuntimeError("connection reset")
        return super().create(model, record)


def test_blog_scenario(blog_schema: str, sink: MemorySink):
    """Test Posts reference only the Users created before them."""
    seeder = Seeder.from_schema(blog_schema, sink)

    assert seeder.seed_order() == ["User", "Post"]

    users = seeder.seed("User", 3)
    posts = seeder.seed("Post", 5)

    assert users.count == 3 and users.success
    assert posts.count == 5 and posts.success

    user_ids = {u["id"] for u in sink.get_records("User")}
    assert len(user_ids) == 3
    assert all(p["authorId"] in user_ids for p in sink.get_records("Post"))


def test_generated_values_follow_hints(blog_schema: str, sink: MemorySink):
    """Test emails look like emails and ages are plausible integers."""
    seeder = Seeder.from_schema(blog_schema, sink)

    seeder.seed("User", 10)

    for user in sink.get_records("User"):
        assert "@" in user["email"]
        assert isinstance(user["age"], int)
        assert 18 <= user["age"] <= 100


def test_seed_all_uses_configured_counts(blog_schema: str, sink: MemorySink):
    """Test seed_all seeds in order with per-model and default counts."""
    config = SeederConfig.from_dict(
        {"global": {"default_count": 4}, "models": {"User": {"count": 2}}}
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    results = seeder.seed_all()

    assert [(r.model, r.count, r.success) for r in results] == [
        ("User", 2, True),
        ("Post", 4, True),
    ]


def test_partial_failure_accounting():
    """Test rejected records are counted as failures, not created."""
    sink = FlakySink()
    schema = "model Tag { id Int @id @default(autoincrement()), label String }"
    seeder = Seeder.from_schema(schema, sink)

    result = seeder.seed("Tag", 9)

    assert sink.calls == 9
    assert result.count == 6
    assert result.count == len(sink.get_records("Tag"))
    assert result.success is True
    assert "simulated constraint violation" in result.error


def test_missing_parent_fails_each_record(blog_schema: str, sink: MemorySink):
    """Test required foreign keys without parents fail the record only."""
    seeder = Seeder.from_schema(blog_schema, sink)

    result = seeder.seed("Post", 3)

    assert result.count == 0
    assert result.success is False
    assert "no 'User' records" in result.error
    assert sink.get_records("Post") == []


def test_failed_model_does_not_stop_the_run(blog_schema: str):
    """Test seed_all continues after a model fails entirely."""
    sink = ExplodingSink()
    config = SeederConfig.from_dict({"global": {"default_count": 2}})
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    results = seeder.seed_all()

    assert [r.model for r in results] == ["User", "Post"]
    assert results[0].success is False
    assert "RuntimeError: connection reset" in results[0].error
    # No users were created, so posts fail their foreign key
    assert results[1].success is False


def test_optional_self_reference(sink: MemorySink):
    """Test optional self references are omitted until a parent exists."""
    schema = """
    model Category {
      id       String     @id
      name     String
      parentId String?
      parent   Category?  @relation("tree", fields: [parentId], references: [id])
      children Category[] @relation("tree")
    }
    """
    seeder = Seeder.from_schema(schema, sink)

    result = seeder.seed("Category", 5)

    records = sink.get_records("Category")
    assert result.count == 5
    assert "parentId" not in records[0]
    ids = {r["id"] for r in records}
    assert all(r["parentId"] in ids for r in records[1:])
    assert all("children" not in r and "parent" not in r for r in records)


def test_store_generated_ids_are_left_to_the_sink(shop_schema: str, sink: MemorySink):
    """Test autoincrement ids come from the sink and flow into foreign keys."""
    config = SeederConfig.from_dict(
        {"models": {"Customer": {"count": 3}, "Order": {"count": 6}}}
    )
    seeder = Seeder.from_schema(shop_schema, sink, config=config)

    results = seeder.seed_all()

    assert all(r.success for r in results)
    customers = sink.get_records("Customer")
    assert [c["id"] for c in customers] == [1, 2, 3]
    for order in sink.get_records("Order"):
        assert order["customerId"] in {1, 2, 3}
        assert isinstance(order["quantity"], int)
        assert isinstance(order["tags"], list) and 1 <= len(order["tags"]) <= 3
    for customer in customers:
        assert customer["role"] in ("CUSTOMER", "ADMIN")
        assert isinstance(customer["active"], bool)


def test_ignore_and_default_value(blog_schema: str, sink: MemorySink):
    """Test ignored fields are omitted and literal defaults always win."""
    config = SeederConfig.from_dict(
        {"models": {"User": {"fields": {"age": {"ignore": True}, "email": {"defaultValue": None}}}}}
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    seeder.seed("User", 3)

    for user in sink.get_records("User"):
        assert "age" not in user
        assert user["email"] is None


def test_default_value_override(blog_schema: str, sink: MemorySink):
    """Test defaultValue is used for every record."""
    config = SeederConfig.from_dict(
        {"models": {"User": {"fields": {"age": {"defaultValue": 30}}}}}
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    seeder.seed("User", 4)

    assert [u["age"] for u in sink.get_records("User")] == [30, 30, 30, 30]


def test_invalid_field_config_skips_field(blog_schema: str, sink: MemorySink):
    """Test min > max skips the field but still seeds the model."""
    config = SeederConfig.from_dict(
        {"models": {"User": {"fields": {"age": {"min": 10, "max": 1}}}}}
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    result = seeder.seed("User", 2)

    assert result.count == 2
    assert all("age" not in u for u in sink.get_records("User"))


def test_unique_values_exhausted(blog_schema: str, sink: MemorySink):
    """Test a unique field that cannot produce fresh values fails the record."""
    config = SeederConfig.from_dict(
        {"models": {"User": {"fields": {"email": {"values": ["only@example.com"]}}}}}
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    result = seeder.seed("User", 3)

    assert result.count == 1
    assert "Could not generate unique value for 'User.email'" in result.error


def test_rejected_record_does_not_use_up_unique_values(blog_schema: str):
    """Test a unique value is only taken once the sink stores the record."""
    sink = RejectFirstSink()
    config = SeederConfig.from_dict(
        {"models": {"User": {"fields": {"email": {"values": ["only@example.com"]}}}}}
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    result = seeder.seed("User", 2)

    assert result.count == 1
    assert [u["email"] for u in sink.get_records("User")] == ["only@example.com"]


ONE_TO_ONE_SCHEMA = """
model User { id String @id }
model Profile { id String @id, userId String @unique, user User @relation(fields: [userId], references: [id]) }
"""


def test_one_to_one_uses_each_parent_once():
    """Test a unique foreign key never points two records at the same parent."""
    sink = MemorySink(unique_fields={"Profile": ["userId"]})
    seeder = Seeder.from_schema(ONE_TO_ONE_SCHEMA, sink)

    seeder.seed("User", 5)
    result = seeder.seed("Profile", 5)

    assert result.count == 5 and result.error is None
    user_ids = {u["id"] for u in sink.get_records("User")}
    assert {p["userId"] for p in sink.get_records("Profile")} == user_ids


def test_one_to_one_runs_out_of_parents():
    """Test extra records fail once every parent is referenced."""
    sink = MemorySink(unique_fields={"Profile": ["userId"]})
    seeder = Seeder.from_schema(ONE_TO_ONE_SCHEMA, sink)

    seeder.seed("User", 2)
    result = seeder.seed("Profile", 3)

    assert result.count == 2
    assert "Every 'User' record is already referenced by unique field 'Profile.userId'" in (
        result.error
    )


def test_optional_one_to_one_leaves_extra_records_unlinked(sink: MemorySink):
    """Test an optional unique foreign key is left empty once parents run out."""
    schema = """
    model User { id String @id }
    model Profile { id String @id, userId String? @unique, user User? @relation(fields: [userId], references: [id]) }
    """
    seeder = Seeder.from_schema(schema, sink)

    seeder.seed("User", 2)
    result = seeder.seed("Profile", 3)

    assert result.count == 3
    linked = [p["userId"] for p in sink.get_records("Profile") if "userId" in p]
    assert sorted(linked) == sorted(u["id"] for u in sink.get_records("User"))


def test_relation_override_selects_parent(sink: MemorySink):
    """Test a relation config can point an unresolved foreign key at a model."""
    schema = """
    model Account { id String @id }
    model Audit { id String @id, ownerRef String }
    """
    config = SeederConfig.from_dict(
        {
            "models": {
                "Audit": {
                    "fields": {"ownerRef": {"type": "relation"}},
                    "relations": {"ownerRef": {"model": "Account"}},
                }
            }
        }
    )
    seeder = Seeder.from_schema(schema, sink, config=config)

    seeder.seed("Account", 2)
    seeder.seed("Audit", 4)

    account_ids = {a["id"] for a in sink.get_records("Account")}
    assert all(a["ownerRef"] in account_ids for a in sink.get_records("Audit"))


def test_reset_deletes_children_first(blog_schema: str):
    """Test reset clears every model in reverse seeding order."""
    deleted = []

    class RecordingSink(MemorySink):
        def delete_all(self, model: str) -> int:
            deleted.append(model)
            return super().delete_all(model)

    sink = RecordingSink()
    seeder = Seeder.from_schema(blog_schema, sink)
    seeder.seed("User", 2)

    seeder.reset()

    assert deleted == ["Post", "User"]
    assert sink.get_records("User") == []


def test_seed_all_with_reset_flag(blog_schema: str, sink: MemorySink):
    """Test global.reset empties existing data before seeding."""
    config = SeederConfig.from_dict(
        {"global": {"reset": True}, "models": {"User": {"count": 2}, "Post": {"count": 1}}}
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    seeder.seed_all()
    seeder.seed_all()

    assert len(sink.get_records("User")) == 2
    assert len(sink.get_records("Post")) == 1


def test_incremental_keeps_existing_data(blog_schema: str, sink: MemorySink):
    """Test incremental runs add records and ignore the reset flag."""
    config = SeederConfig.from_dict(
        {
            "global": {"reset": True, "incremental": True},
            "models": {"User": {"count": 2}, "Post": {"count": 1}},
        }
    )
    seeder = Seeder.from_schema(blog_schema, sink, config=config)

    seeder.seed_all()
    seeder.seed_all()

    assert len(sink.get_records("User")) == 4
    assert len(sink.get_records("Post")) == 2


def test_cancelled_run_stops_between_models(blog_schema: str, sink: MemorySink):
    """Test a set cancel event stops before the next model."""
    cancel = threading.Event()
    cancel.set()
    seeder = Seeder.from_schema(blog_schema, sink)

    assert seeder.seed_all(cancel_event=cancel) == []
    assert sink.get_records("User") == []


def test_deterministic_with_seed():
    """Test randomize=false with a seed reproduces the same records."""
    schema = "model User { id String @id, email String @unique, age Int, nickname String }"
    config = SeederConfig.from_dict({"global": {"randomize": False, "seed": 99}})

    first, second = MemorySink(), MemorySink()
    Seeder.from_schema(schema, first, config=config, faker=Faker()).seed("User", 5)
    Seeder.from_schema(schema, second, config=config, faker=Faker()).seed("User", 5)

    assert first.get_records("User") == second.get_records("User")


def test_zero_count_is_success(blog_schema: str, sink: MemorySink):
    """Test requesting no records is not a failure."""
    result = Seeder.from_schema(blog_schema, sink).seed("User", 0)

    assert result.count == 0
    assert result.success is True
    assert result.error is None


def test_unknown_model(blog_schema: str, sink: MemorySink):
    """Test seeding an undeclared model raises ModelNotFoundError."""
    seeder = Seeder.from_schema(blog_schema, sink)

    with pytest.raises(ModelNotFoundError, match="Available models: User, Post"):
        seeder.seed("Comment")


def test_empty_schema_seeds_nothing(sink: MemorySink):
    """Test an empty model catalog is handled gracefully."""
    seeder = Seeder.from_schema("", sink)

    assert seeder.get_models() == []
    assert seeder.seed_all() == []


def test_from_file(tmp_path, blog_schema: str, sink: MemorySink):
    """Test building from a schema file, and failing on a missing one."""
    path = tmp_path / "schema.prisma"
    path.write_text(blog_schema)

    seeder = Seeder.from_file(path, sink)
    assert [m.name for m in seeder.get_models()] == ["User", "Post"]
    assert seeder.get_model("Post").get_field("authorId").is_foreign_key

    with pytest.raises(SchemaReadError):
        Seeder.from_file(tmp_path / "missing.prisma", sink)
