"""Tests for schema tokenizing and parsing."""

import pytest

from prisma_seed.exceptions import SchemaReadError
from prisma_seed.schema import load_schema, normalize_type, parse_schema, relation_cardinality
from prisma_seed.schema.lexer import TokenKind, tokenize
from prisma_seed.schema.parser import Call, SchemaParser, parse_default_value


def test_tokenize_skips_comments_and_keeps_newlines():
    """Test tokenizer drops comments and whitespace but keeps line breaks."""
    tokens = tokenize('model A { // note\n  id Int @id /* block\n comment */ }')

    kinds = [t.kind for t in tokens]
    assert TokenKind.NEWLINE in kinds
    assert kinds[-1] == TokenKind.EOF
    assert "note" not in [t.value for t in tokens]
    assert "comment" not in [t.value for t in tokens]
    # Block comment spanning a line still advances the line counter
    assert tokens[-1].line == 3


def test_tokenize_unquotes_strings():
    """Test string literals lose their quotes and escapes."""
    tokens = tokenize('@default("say \\"hi\\"")')

    strings = [t.value for t in tokens if t.kind == TokenKind.STRING]
    assert strings == ['say "hi"']


def test_tokenize_never_fails_on_garbage():
    """Test unknown characters become OTHER tokens instead of errors."""
    tokens = tokenize("model $ ~ { }")

    assert TokenKind.OTHER in [t.kind for t in tokens]
    assert tokens[-1].kind == TokenKind.EOF


def test_parse_blog_scenario(blog_schema: str):
    """Test one-line comma separated models with an FK on the scalar field."""
    models = parse_schema(blog_schema)

    assert [m.name for m in models] == ["User", "Post"]

    user, post = models
    assert [f.name for f in user.fields] == ["id", "email", "age"]
    assert user.primary_key.name == "id"
    assert user.get_field("email").is_unique
    assert user.get_field("age").type == "number"

    author_id = post.get_field("authorId")
    assert author_id.is_foreign_key
    assert author_id.relation_model == "User"
    assert author_id.relation_field == "id"
    assert author_id.type == "string"


def test_parse_is_idempotent(blog_schema: str):
    """Test parsing the same text twice yields identical descriptors."""
    assert parse_schema(blog_schema) == parse_schema(blog_schema)


def test_type_inference():
    """Test declared types map to semantic type tags."""
    models = parse_schema(
        """
        model Sample {
          name    String
          count   Int
          enabled Boolean
          when    DateTime
          kind    Kind
        }
        """
    )

    types = [f.type for f in models[0].fields]
    assert types == ["string", "number", "boolean", "string", "enum"]


@pytest.mark.parametrize(
    "declared,expected",
    [
        ("String", "string"),
        ("String?", "string"),
        ("Int[]", "number"),
        ("BigInt", "number"),
        ("Float", "number"),
        ("Decimal", "number"),
        ("Boolean", "boolean"),
        ("DateTime", "string"),
        ("Json", "string"),
        ("Status", "enum"),
        ("geometry", "geometry"),
    ],
)
def test_normalize_type(declared: str, expected: str):
    """Test normalize_type strips modifiers and classifies types."""
    assert normalize_type(declared) == expected


def test_parse_shop_schema(shop_schema: str):
    """Test multi-line schema with skipped blocks, enums and relation fields."""
    parser = SchemaParser()
    models = parser.parse(shop_schema)

    assert [m.name for m in models] == ["Customer", "Order"]
    assert parser.enums["Role"].values == ("CUSTOMER", "ADMIN")

    customer, order = models

    customer_id = customer.get_field("id")
    assert customer_id.is_primary_key
    assert customer_id.default_function == "autoincrement"
    assert customer_id.is_generated_by_store

    name = customer.get_field("name")
    assert not name.is_required

    role = customer.get_field("role")
    assert role.type == "enum"
    assert role.enum_values == ("CUSTOMER", "ADMIN")
    assert role.default_value == "CUSTOMER"

    assert customer.get_field("active").default_value is True
    assert customer.get_field("createdAt").default_function == "now"

    orders = customer.get_field("orders")
    assert orders.is_relation
    assert orders.is_list

    customer_fk = order.get_field("customerId")
    assert customer_fk.is_foreign_key
    assert customer_fk.relation_model == "Customer"
    assert customer_fk.relation_field == "id"

    assert order.get_field("id").default_function == "uuid"
    assert order.get_field("id").default_value is None
    assert order.get_field("tags").is_list

    relation = order.relations[0]
    assert relation.name == "customer"
    assert relation.model == "Customer"
    assert relation.foreign_key == "customerId"
    assert relation.type == "oneToMany"


def test_single_line_enum():
    """Test enum members written on one line are all captured."""
    parser = SchemaParser()
    models = parser.parse("enum Color { RED GREEN BLUE }\nmodel Car { id Int @id, color Color }")

    assert parser.enums["Color"].values == ("RED", "GREEN", "BLUE")
    assert models[0].get_field("color").enum_values == ("RED", "GREEN", "BLUE")


def test_compound_primary_key():
    """Test @@id marks every listed field as primary key."""
    models = parse_schema(
        """
        model Membership {
          userId  String
          groupId String
          @@id([userId, groupId])
        }
        """
    )

    fields = {f.name: f for f in models[0].fields}
    assert fields["userId"].is_primary_key
    assert fields["groupId"].is_primary_key


def test_self_reference():
    """Test a model referencing itself is detected."""
    models = parse_schema(
        """
        model Category {
          id       String     @id
          parentId String?
          parent   Category?  @relation("tree", fields: [parentId], references: [id])
          children Category[] @relation("tree")
        }
        """
    )

    category = models[0]
    self_refs = category.get_self_referencing_fks()
    assert [f.name for f in self_refs] == ["parentId"]
    assert not self_refs[0].is_required


def test_malformed_declaration_is_skipped():
    """Test an unparseable line is skipped without losing the rest of the model."""
    models = parse_schema(
        """
        model Broken {
          id String @id
          ??? not a field
          name String @default(
          email String
        }
        model Fine { id Int @id }
        """
    )

    names = [m.name for m in models]
    assert "Broken" in names
    assert "Fine" in names
    broken = models[0]
    assert broken.get_field("id") is not None


def test_empty_and_modelless_text():
    """Test text without model blocks yields an empty list, never an error."""
    assert parse_schema("") == []
    assert parse_schema("this is not a schema at all") == []
    assert parse_schema('datasource db { provider = "sqlite" }') == []


def test_duplicate_model_is_ignored():
    """Test a repeated model name keeps only the first declaration."""
    models = parse_schema("model A { id Int @id }\nmodel A { other String }")

    assert len(models) == 1
    assert models[0].get_field("id") is not None


@pytest.mark.parametrize(
    "is_optional,is_list,expected",
    [
        (False, True, "manyToMany"),
        (True, False, "oneToOne"),
        (False, False, "oneToMany"),
    ],
)
def test_relation_cardinality(is_optional: bool, is_list: bool, expected: str):
    """Test cardinality heuristic from type modifiers."""
    assert relation_cardinality(is_optional, is_list) == expected


def test_literal_defaults():
    """Test @default literals are converted to Python values."""
    models = parse_schema(
        """
        model Settings {
          id      Int     @id @default(autoincrement())
          label   String  @default("main")
          retries Int     @default(3)
          ratio   Float   @default(0.5)
          enabled Boolean @default(false)
          token   String  @default(cuid())
        }
        """
    )

    fields = {f.name: f for f in models[0].fields}
    assert fields["label"].default_value == "main"
    assert fields["retries"].default_value == 3
    assert fields["ratio"].default_value == 0.5
    assert fields["enabled"].default_value is False
    assert fields["token"].default_value is None
    assert fields["token"].default_function == "cuid"


def test_parse_default_value_for_unknown_function():
    """Test unknown default functions are kept as text with their name."""
    assert parse_default_value(Call(name="sequence")) == ("sequence()", "sequence")


def test_load_schema_reads_file(tmp_path, blog_schema: str):
    """Test loading a schema from disk."""
    path = tmp_path / "schema.prisma"
    path.write_text(blog_schema)

    models = load_schema(path)

    assert [m.name for m in models] == ["User", "Post"]


def test_load_schema_missing_file(tmp_path):
    """Test unreadable schema source raises SchemaReadError."""
    with pytest.raises(SchemaReadError, match="Could not read schema file"):
        load_schema(tmp_path / "missing.prisma")
