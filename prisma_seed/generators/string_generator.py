"""Faker-based string generator."""

from typing import Any

from prisma_seed.config import FieldConfig
from prisma_seed.generators.base import BaseGenerator, is_missing, match_hint

# Field name words -> Faker call. First match wins, so specific rules go first.
HINT_RULES = [
    (("uuid",), lambda f: f.uuid4()),
    (("guid",), lambda f: f.uuid4()),
    (("id",), lambda f: f.uuid4()),
    (("email",), lambda f: f.email()),
    (("mail",), lambda f: f.email()),
    (("first", "name"), lambda f: f.first_name()),
    (("firstname",), lambda f: f.first_name()),
    (("given", "name"), lambda f: f.first_name()),
    (("last", "name"), lambda f: f.last_name()),
    (("lastname",), lambda f: f.last_name()),
    (("surname",), lambda f: f.last_name()),
    (("user", "name"), lambda f: f.user_name()),
    (("username",), lambda f: f.user_name()),
    (("company",), lambda f: f.company()),
    (("organization",), lambda f: f.company()),
    (("phone",), lambda f: f.phone_number()),
    (("mobile",), lambda f: f.phone_number()),
    (("ip",), lambda f: f.ipv4()),
    (("street",), lambda f: f.street_address()),
    (("address",), lambda f: f.address()),
    (("city",), lambda f: f.city()),
    (("state",), lambda f: f.state()),
    (("country",), lambda f: f.country()),
    (("zip",), lambda f: f.postcode()),
    (("zipcode",), lambda f: f.postcode()),
    (("postal",), lambda f: f.postcode()),
    (("postcode",), lambda f: f.postcode()),
    (("avatar",), lambda f: f.image_url()),
    (("image",), lambda f: f.image_url()),
    (("photo",), lambda f: f.image_url()),
    (("url",), lambda f: f.url()),
    (("website",), lambda f: f.url()),
    (("link",), lambda f: f.url()),
    (("password",), lambda f: f.password()),
    (("token",), lambda f: f.sha256()),
    (("slug",), lambda f: f.slug()),
    (("color",), lambda f: f.color_name()),
    (("currency",), lambda f: f.currency_code()),
    (("title",), lambda f: f.sentence(nb_words=6).rstrip(".")),
    (("subject",), lambda f: f.sentence(nb_words=6).rstrip(".")),
    (("description",), lambda f: f.text(max_nb_chars=200)),
    (("bio",), lambda f: f.text(max_nb_chars=300)),
    (("content",), lambda f: f.paragraph()),
    (("body",), lambda f: f.paragraph()),
    (("summary",), lambda f: f.text(max_nb_chars=200)),
    (("comment",), lambda f: f.sentence()),
    (("name",), lambda f: f.name()),
]


class StringGenerator(BaseGenerator):
    """
    Generate realistic text for a field.

    Resolution order: named generator, explicit values, pattern template,
    field name hint (email, name, address, url, ...), then generic text.
    """

    def generate(self, field_name: str, config: FieldConfig | None = None, **context: Any) -> Any:
        value = self._configured(field_name, config, context)
        if not is_missing(value):
            return value

        if config is not None and config.pattern:
            return self.fake.bothify(config.pattern)

        producer = match_hint(field_name, HINT_RULES)
        if producer is not None:
            return producer(self.fake)

        return self.fake.text(max_nb_chars=50)
