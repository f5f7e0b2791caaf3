"""
Catalog Seed Data

Sample books loaded at startup when CATALOG_SEARCH_SEED_CATALOG is true.
"""

from src.catalog.models import Book
from src.catalog.store import InMemoryBookCatalog

SAMPLE_BOOKS: tuple[Book, ...] = (
    Book(
        id="1",
        title="Harry Potter and the Philosopher's Stone",
        author="J.K. Rowling",
        genre="Fantasy",
        published_year=1997,
        isbn="978-0-7475-3269-9",
        stock_count=5,
    ),
    Book(
        id="2",
        title="The Lord of the Rings",
        author="J.R.R. Tolkien",
        genre="Fantasy",
        published_year=1954,
        isbn="978-0-618-00222-1",
        stock_count=3,
    ),
    Book(
        id="3",
        title="To Kill a Mockingbird",
        author="Harper Lee",
        genre="Fiction",
        published_year=1960,
        isbn="978-0-06-112008-4",
        stock_count=7,
    ),
    Book(
        id="4",
        title="1984",
        author="George Orwell",
        genre="Dystopian",
        published_year=1949,
        isbn="978-0-452-28423-4",
        stock_count=4,
    ),
    Book(
        id="5",
        title="Pride and Prejudice",
        author="Jane Austen",
        genre="Romance",
        published_year=1813,
        isbn="978-0-14-143951-8",
        stock_count=6,
    ),
    Book(
        id="6",
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        genre="Fiction",
        published_year=1925,
        isbn="978-0-7432-7356-5",
        stock_count=8,
    ),
    Book(
        id="7",
        title="The Hobbit",
        author="J.R.R. Tolkien",
        genre="Fantasy",
        published_year=1937,
        isbn="978-0-618-00221-4",
        stock_count=10,
    ),
    Book(
        id="8",
        title="The Catcher in the Rye",
        author="J.D. Salinger",
        genre="Fiction",
        published_year=1951,
        isbn="978-0-316-76948-0",
        stock_count=2,
    ),
    Book(
        id="9",
        title="Animal Farm",
        author="George Orwell",
        genre="Dystopian",
        published_year=1945,
        isbn="978-0-452-28424-1",
        stock_count=9,
    ),
    Book(
        id="10",
        title="The Alchemist",
        author="Paulo Coelho",
        genre="Fiction",
        published_year=1988,
        isbn="978-0-06-231500-7",
        stock_count=12,
    ),
)


def seed_catalog(catalog: InMemoryBookCatalog) -> int:
    """Replace the catalog contents with SAMPLE_BOOKS.

    Returns:
        Number of books seeded
    """
    catalog.replace_all(SAMPLE_BOOKS)
    return len(SAMPLE_BOOKS)
