"""Recursive-descent parser for model-definition schemas.

Turns the token stream from :mod:`prisma_seed.schema.lexer` into SchemaModel
descriptors. Parsing runs in two phases:

1. Declarations: every ``model`` and ``enum`` block is read into raw field
   declarations. Unknown blocks (``datasource``, ``generator``, ...) are skipped.
2. Resolution: with the full set of model and enum names known, each declaration
   becomes either a scalar SchemaField or a relation (SchemaRelation plus a
   virtual ``relation`` field), and foreign keys are linked to their parent model.

A declaration that cannot be parsed is skipped; it never aborts the whole parse.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from prisma_seed.exceptions import SchemaParseError
from prisma_seed.models import SchemaEnum, SchemaField, SchemaModel, SchemaRelation
from prisma_seed.schema.lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

STRING_TYPES = {"String", "DateTime", "Date", "Json", "Bytes", "Text", "Uuid"}
NUMBER_TYPES = {"Int", "BigInt", "Float", "Decimal"}
BOOLEAN_TYPES = {"Boolean"}

# Default functions whose value must be produced downstream, never copied
GENERATED_DEFAULTS = {"uuid", "cuid", "autoincrement", "dbgenerated", "auto", "nanoid", "ulid"}

_FK_SUFFIX_RE = re.compile(r"^(?P<base>.+?)_?(?:Id|ID|id)$")


@dataclass(frozen=True)
class Ident:
    """Bare identifier used as an attribute argument (e.g. ``Cascade``)."""

    name: str


@dataclass(frozen=True)
class Call:
    """Function call used as an attribute argument (e.g. ``now()``)."""

    name: str
    args: tuple[Any, ...] = ()


@dataclass
class Attribute:
    """A field attribute such as ``@default(now())`` or ``@db.VarChar(255)``."""

    name: str
    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)


@dataclass
class FieldDeclaration:
    """A field exactly as written, before type resolution."""

    name: str
    type_name: str
    is_list: bool
    is_optional: bool
    attributes: dict[str, Attribute]
    line: int


@dataclass
class ModelDeclaration:
    """A model block exactly as written."""

    name: str
    fields: list[FieldDeclaration] = field(default_factory=list)
    id_fields: list[str] = field(default_factory=list)


class _TokenStream:
    """Cursor over a token list."""

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._pos = 0

    def peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != TokenKind.EOF:
            self._pos += 1
        return token

    def at(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def expect(self, kind: TokenKind, what: str) -> Token:
        token = self.peek()
        if token.kind != kind:
            raise SchemaParseError(
                f"Expected {what}, found '{token.value or token.kind.value}'", token.line
            )
        return self.advance()

    def skip_newlines(self) -> None:
        while self.at(TokenKind.NEWLINE):
            self.advance()


class SchemaParser:
    """
    Parse schema text into SchemaModel descriptors.

    Only depends on raw text: no database client or connection is needed.

    Example:
        >>> parser = SchemaParser()
        >>> models = parser.parse("model User { id String @id, age Int }")
        >>> [f.type for f in models[0].fields]
        ['string', 'number']
    """

    def __init__(self) -> None:
        self.enums: dict[str, SchemaEnum] = {}

    def parse(self, text: str) -> list[SchemaModel]:
        """
        Parse schema text.

        Args:
            text: Schema text containing ``model Name { ... }`` blocks

        Returns:
            One SchemaModel per model block, in source order. Empty when the
            text holds no model blocks (a valid, if unhelpful, outcome).
        """
        stream = _TokenStream(tokenize(text))
        declarations, enums = self._parse_document(stream)
        self.enums = {enum.name: enum for enum in enums}

        models = self._resolve(declarations)

        if not models and text.strip():
            logger.warning("No model blocks found in non-empty schema text")
        logger.info(f"Parsed {len(models)} models from schema")
        return models

    # ------------------------------------------------------------------
    # Phase 1: declarations
    # ------------------------------------------------------------------

    def _parse_document(
        self, stream: _TokenStream
    ) -> tuple[list[ModelDeclaration], list[SchemaEnum]]:
        declarations: list[ModelDeclaration] = []
        enums: list[SchemaEnum] = []
        seen: set[str] = set()

        while not stream.at(TokenKind.EOF):
            token = stream.peek()
            if not (token.kind == TokenKind.IDENT and self._starts_block(stream)):
                stream.advance()
                continue

            keyword = stream.advance().value
            name = stream.advance().value
            stream.skip_newlines()
            stream.expect(TokenKind.LBRACE, "'{'")

            if keyword in ("model", "enum") and name in seen:
                logger.warning(f"Duplicate declaration '{name}' ignored (line {token.line})")
                self._skip_block(stream)
            elif keyword == "model":
                seen.add(name)
                declarations.append(self._parse_model_body(stream, name))
            elif keyword == "enum":
                seen.add(name)
                enums.append(self._parse_enum_body(stream, name))
            else:
                logger.debug(f"Skipping '{keyword} {name}' block")
                self._skip_block(stream)

        return declarations, enums

    @staticmethod
    def _starts_block(stream: _TokenStream) -> bool:
        """Check for ``<keyword> <Name> {`` at the cursor."""
        if not stream.peek(1).kind == TokenKind.IDENT:
            return False
        offset = 2
        while stream.peek(offset).kind == TokenKind.NEWLINE:
            offset += 1
        return stream.peek(offset).kind == TokenKind.LBRACE

    @staticmethod
    def _skip_block(stream: _TokenStream) -> None:
        """Skip to the brace closing the block just opened."""
        depth = 1
        while depth and not stream.at(TokenKind.EOF):
            token = stream.advance()
            if token.kind == TokenKind.LBRACE:
                depth += 1
            elif token.kind == TokenKind.RBRACE:
                depth -= 1

    def _parse_model_body(self, stream: _TokenStream, name: str) -> ModelDeclaration:
        model = ModelDeclaration(name=name)
        field_names: set[str] = set()

        while True:
            while stream.at(TokenKind.NEWLINE, TokenKind.COMMA):
                stream.advance()
            if stream.at(TokenKind.RBRACE):
                stream.advance()
                break
            if stream.at(TokenKind.EOF):
                logger.debug(f"Model '{name}' is not closed before end of input")
                break

            start = stream.peek()
            try:
                if start.kind == TokenKind.ATAT:
                    self._parse_block_attribute(stream, model)
                    continue
                declaration = self._parse_field(stream)
            except SchemaParseError as e:
                logger.debug(f"Skipping declaration in model '{name}': {e}")
                self._skip_declaration(stream)
                continue

            if declaration.name in field_names:
                logger.debug(f"Duplicate field '{name}.{declaration.name}' ignored")
                continue
            field_names.add(declaration.name)
            model.fields.append(declaration)

        return model

    def _parse_enum_body(self, stream: _TokenStream, name: str) -> SchemaEnum:
        values: list[str] = []

        while not stream.at(TokenKind.EOF):
            token = stream.advance()
            if token.kind == TokenKind.RBRACE:
                break
            if token.kind in (TokenKind.AT, TokenKind.ATAT):
                # @map("...") and friends annotate a member, they are not members
                try:
                    self._parse_attribute(stream)
                except SchemaParseError as e:
                    logger.debug(f"Skipping attribute in enum '{name}': {e}")
            elif token.kind == TokenKind.IDENT:
                values.append(token.value)

        return SchemaEnum(name=name, values=tuple(values))

    def _parse_field(self, stream: _TokenStream) -> FieldDeclaration:
        name_token = stream.expect(TokenKind.IDENT, "field name")
        type_token = stream.expect(TokenKind.IDENT, f"type for field '{name_token.value}'")

        if stream.at(TokenKind.LPAREN):
            # Unsupported("...") style types
            stream.advance()
            self._parse_arguments(stream)

        is_list = is_optional = False
        if stream.at(TokenKind.LBRACKET):
            stream.advance()
            stream.expect(TokenKind.RBRACKET, "']'")
            is_list = True
        if stream.at(TokenKind.QUESTION):
            stream.advance()
            is_optional = True

        attributes: dict[str, Attribute] = {}
        while stream.at(TokenKind.AT):
            stream.advance()
            attribute = self._parse_attribute(stream)
            attributes.setdefault(attribute.name, attribute)

        if not stream.at(TokenKind.NEWLINE, TokenKind.COMMA, TokenKind.RBRACE, TokenKind.EOF):
            unexpected = stream.peek()
            raise SchemaParseError(
                f"Unexpected '{unexpected.value}' after field '{name_token.value}'",
                unexpected.line,
            )

        return FieldDeclaration(
            name=name_token.value,
            type_name=type_token.value,
            is_list=is_list,
            is_optional=is_optional,
            attributes=attributes,
            line=name_token.line,
        )

    def _parse_block_attribute(self, stream: _TokenStream, model: ModelDeclaration) -> None:
        stream.expect(TokenKind.ATAT, "'@@'")
        attribute = self._parse_attribute(stream)
        if attribute.name == "id":
            fields = attribute.kwargs.get("fields", attribute.args[0] if attribute.args else [])
            if isinstance(fields, list):
                model.id_fields.extend(v.name for v in fields if isinstance(v, Ident))

    def _parse_attribute(self, stream: _TokenStream) -> Attribute:
        parts = [stream.expect(TokenKind.IDENT, "attribute name").value]
        while stream.at(TokenKind.DOT):
            stream.advance()
            parts.append(stream.expect(TokenKind.IDENT, "attribute name").value)

        attribute = Attribute(name=".".join(parts))
        if stream.at(TokenKind.LPAREN):
            stream.advance()
            attribute.args, attribute.kwargs = self._parse_arguments(stream)
        return attribute

    def _parse_arguments(self, stream: _TokenStream) -> tuple[list[Any], dict[str, Any]]:
        """Parse ``a, b, key: value)`` after an opening parenthesis."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        while True:
            stream.skip_newlines()
            if stream.at(TokenKind.RPAREN):
                stream.advance()
                return args, kwargs

            if stream.peek().kind == TokenKind.IDENT and stream.peek(1).kind == TokenKind.COLON:
                key = stream.advance().value
                stream.advance()
                kwargs[key] = self._parse_value(stream)
            else:
                args.append(self._parse_value(stream))

            stream.skip_newlines()
            if stream.at(TokenKind.COMMA):
                stream.advance()
            elif not stream.at(TokenKind.RPAREN):
                token = stream.peek()
                raise SchemaParseError(f"Expected ',' or ')', found '{token.value}'", token.line)

    def _parse_value(self, stream: _TokenStream) -> Any:
        token = stream.advance()

        if token.kind == TokenKind.STRING:
            return token.value
        if token.kind == TokenKind.NUMBER:
            return float(token.value) if "." in token.value else int(token.value)
        if token.kind == TokenKind.LBRACKET:
            items = []
            stream.skip_newlines()
            while not stream.at(TokenKind.RBRACKET):
                items.append(self._parse_value(stream))
                stream.skip_newlines()
                if stream.at(TokenKind.COMMA):
                    stream.advance()
                    stream.skip_newlines()
                elif not stream.at(TokenKind.RBRACKET):
                    bad = stream.peek()
                    raise SchemaParseError(f"Unterminated list at '{bad.value}'", bad.line)
            stream.advance()
            return items
        if token.kind == TokenKind.IDENT:
            name = token.value
            while stream.at(TokenKind.DOT) and stream.peek(1).kind == TokenKind.IDENT:
                stream.advance()
                name = f"{name}.{stream.advance().value}"
            if stream.at(TokenKind.LPAREN):
                stream.advance()
                args, _ = self._parse_arguments(stream)
                return Call(name=name, args=tuple(args))
            return Ident(name=name)

        raise SchemaParseError(f"Unexpected '{token.value}' in attribute arguments", token.line)

    @staticmethod
    def _skip_declaration(stream: _TokenStream) -> None:
        """Skip to the next top-level separator, leaving a closing brace in place."""
        depth = 0
        while not stream.at(TokenKind.EOF):
            token = stream.peek()
            if depth == 0 and token.kind in (TokenKind.NEWLINE, TokenKind.COMMA, TokenKind.RBRACE):
                return
            if token.kind in (TokenKind.LPAREN, TokenKind.LBRACKET):
                depth += 1
            elif token.kind in (TokenKind.RPAREN, TokenKind.RBRACKET):
                depth = max(0, depth - 1)
            stream.advance()

    # ------------------------------------------------------------------
    # Phase 2: resolution
    # ------------------------------------------------------------------

    def _resolve(self, declarations: list[ModelDeclaration]) -> list[SchemaModel]:
        model_names = [d.name for d in declarations]
        primary_keys = {d.name: self._primary_key_names(d) for d in declarations}

        models = []
        for declaration in declarations:
            fk_targets = self._foreign_key_targets(declaration, set(model_names))
            fields: list[SchemaField] = []
            relations: list[SchemaRelation] = []

            for decl in declaration.fields:
                if decl.type_name in model_names:
                    schema_field, relation = self._build_relation(decl)
                    fields.append(schema_field)
                    relations.append(relation)
                else:
                    fields.append(
                        self._build_scalar(
                            decl, declaration, fk_targets, model_names, primary_keys
                        )
                    )

            models.append(
                SchemaModel(name=declaration.name, fields=tuple(fields), relations=tuple(relations))
            )
        return models

    @staticmethod
    def _primary_key_names(declaration: ModelDeclaration) -> set[str]:
        names = {f.name for f in declaration.fields if "id" in f.attributes}
        names.update(declaration.id_fields)
        return names

    @staticmethod
    def _relation_columns(attribute: Attribute | None) -> tuple[list[str], list[str]]:
        """Extract ``fields: [...]`` and ``references: [...]`` names."""
        if attribute is None:
            return [], []

        def names(value: Any) -> list[str]:
            if isinstance(value, list):
                return [v.name for v in value if isinstance(v, Ident)]
            if isinstance(value, Ident):
                return [value.name]
            return []

        return names(attribute.kwargs.get("fields")), names(attribute.kwargs.get("references"))

    def _foreign_key_targets(
        self, declaration: ModelDeclaration, model_names: set[str]
    ) -> dict[str, tuple[str, str | None]]:
        """Map FK scalar names to (parent model, referenced field) via relation fields."""
        targets: dict[str, tuple[str, str | None]] = {}
        for decl in declaration.fields:
            if decl.type_name not in model_names:
                continue
            fields, references = self._relation_columns(decl.attributes.get("relation"))
            for index, fk_name in enumerate(fields):
                reference = references[index] if index < len(references) else None
                targets.setdefault(fk_name, (decl.type_name, reference))
        return targets

    def _build_relation(self, decl: FieldDeclaration) -> tuple[SchemaField, SchemaRelation]:
        fields, references = self._relation_columns(decl.attributes.get("relation"))

        relation = SchemaRelation(
            name=decl.name,
            type=relation_cardinality(decl.is_optional, decl.is_list),
            model=decl.type_name,
            field=decl.name,
            foreign_key=", ".join(fields) or None,
        )
        schema_field = SchemaField(
            name=decl.name,
            type="relation",
            is_required=not decl.is_optional,
            relation_model=decl.type_name,
            relation_field=", ".join(references) or None,
            native_type=decl.type_name,
            is_list=decl.is_list,
        )
        return schema_field, relation

    def _build_scalar(
        self,
        decl: FieldDeclaration,
        owner: ModelDeclaration,
        fk_targets: dict[str, tuple[str, str | None]],
        model_names: list[str],
        primary_keys: dict[str, set[str]],
    ) -> SchemaField:
        attributes = decl.attributes
        relation_attribute = attributes.get("relation")

        is_foreign_key = relation_attribute is not None or decl.name in fk_targets
        relation_model = relation_field = None
        if decl.name in fk_targets:
            relation_model, relation_field = fk_targets[decl.name]
        elif relation_attribute is not None:
            fields, references = self._relation_columns(relation_attribute)
            if decl.name in fields and fields.index(decl.name) < len(references):
                relation_field = references[fields.index(decl.name)]
            elif references:
                relation_field = references[0]
            relation_model = guess_relation_model(
                decl.name, owner.name, relation_field, model_names, primary_keys
            )

        default_value = default_function = None
        default_attribute = attributes.get("default")
        if default_attribute is not None and default_attribute.args:
            default_value, default_function = parse_default_value(default_attribute.args[0])

        enum = self.enums.get(decl.type_name)

        return SchemaField(
            name=decl.name,
            type=normalize_type(decl.type_name, set(self.enums)),
            is_required=not decl.is_optional,
            is_unique="unique" in attributes,
            is_primary_key=decl.name in primary_keys[owner.name],
            is_foreign_key=is_foreign_key,
            relation_model=relation_model,
            relation_field=relation_field,
            default_value=default_value,
            enum_values=enum.values if enum is not None else None,
            native_type=decl.type_name,
            is_list=decl.is_list,
            default_function=default_function,
        )


def normalize_type(declared: str, enum_names: set[str] | None = None) -> str:
    """
    Normalize a declared type into a semantic type tag.

    Args:
        declared: Type name as declared (modifiers are stripped)
        enum_names: Names of declared enum blocks

    Returns:
        'string', 'number', 'boolean', 'enum', or the lowercased raw type

    Examples:
        >>> normalize_type("DateTime")
        'string'
        >>> normalize_type("Role")
        'enum'
    """
    clean = declared.replace("?", "").replace("[]", "").strip()

    if clean in STRING_TYPES:
        return "string"
    if clean in NUMBER_TYPES:
        return "number"
    if clean in BOOLEAN_TYPES:
        return "boolean"
    if (enum_names and clean in enum_names) or clean.startswith("enum") or clean[:1].isupper():
        return "enum"
    return clean.lower()


def relation_cardinality(is_optional: bool, is_list: bool) -> str:
    """
    Infer relation cardinality from type modifiers.

    This is a syntactic heuristic: a required single reference cannot be told
    apart from a one-to-many without inspecting the other side of the relation.
    """
    if is_list:
        return "manyToMany"
    if is_optional:
        return "oneToOne"
    return "oneToMany"


def parse_default_value(value: Any) -> tuple[Any, str | None]:
    """
    Convert a parsed ``@default(...)`` argument into a literal.

    Returns:
        (literal, default function name). Generated defaults such as uuid()
        yield (None, 'uuid') so the value is produced downstream.
    """
    if isinstance(value, Call):
        name = value.name.lower()
        if name == "now":
            return datetime.now(), "now"
        if name in GENERATED_DEFAULTS:
            return None, name
        return f"{value.name}()", name
    if isinstance(value, Ident):
        if value.name == "true":
            return True, None
        if value.name == "false":
            return False, None
        return value.name, None
    if isinstance(value, list):
        return [parse_default_value(item)[0] for item in value], None
    return value, None


def guess_relation_model(
    field_name: str,
    owner: str,
    referenced_field: str | None,
    model_names: list[str],
    primary_keys: dict[str, set[str]],
) -> str | None:
    """
    Best-effort parent lookup for a foreign key with no explicit relation field.

    Tries the field name without its ``Id`` suffix (``authorId`` -> ``Author``),
    then the single other model whose primary key is the referenced field.
    """
    match = _FK_SUFFIX_RE.match(field_name)
    if match:
        by_lower = {name.lower(): name for name in model_names}
        candidate = by_lower.get(match.group("base").lower())
        if candidate:
            return candidate

    if referenced_field:
        candidates = [
            name
            for name in model_names
            if name != owner and referenced_field in primary_keys.get(name, set())
        ]
        if len(candidates) == 1:
            return candidates[0]

    logger.debug(f"Could not resolve parent model for foreign key '{owner}.{field_name}'")
    return None
