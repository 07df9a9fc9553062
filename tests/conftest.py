"""Pytest configuration and shared fixtures."""

import pytest
from faker import Faker

from prisma_seed import MemorySink, clear_generators

BLOG_SCHEMA = """
model User { id String @id, email String @unique, age Int }
model Post { id String @id, title String, authorId String @relation(fields: [authorId], references: [id]) }
"""

SHOP_SCHEMA = """
// Shop schema used across tests
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

generator client {
  provider = "prisma-client-js"
}

enum Role {
  CUSTOMER
  ADMIN @map("admin")
}

model Customer {
  id        Int       @id @default(autoincrement())
  email     String    @unique
  name      String?
  role      Role      @default(CUSTOMER)
  active    Boolean   @default(true)
  createdAt DateTime  @default(now())
  orders    Order[]
}

model Order {
  id         String   @id @default(uuid())
  total      Float
  quantity   Int
  customerId Int
  customer   Customer @relation(fields: [customerId], references: [id])
  tags       String[]
}
"""


@pytest.fixture
def blog_schema() -> str:
    """Two-model schema where Post.authorId references User.id."""
    return BLOG_SCHEMA


@pytest.fixture
def shop_schema() -> str:
    """Multi-line schema with datasource/generator blocks, an enum and relations."""
    return SHOP_SCHEMA


@pytest.fixture
def sink() -> MemorySink:
    """Provide an empty in-memory record sink."""
    return MemorySink()


@pytest.fixture
def faker() -> Faker:
    """Provide a seeded Faker instance for reproducible generator tests."""
    fake = Faker()
    fake.seed_instance(1234)
    return fake


@pytest.fixture(autouse=True)
def _clear_generator_registry():
    """Keep custom generator registrations from leaking between tests."""
    yield
    clear_generators()
