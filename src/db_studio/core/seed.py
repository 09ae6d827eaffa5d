"""Sample tables and rows for a fresh local store."""

import logging

from sqlalchemy import text

from db_studio.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        email TEXT UNIQUE NOT NULL,
        status TEXT DEFAULT 'active',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER REFERENCES users(id),
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        published BOOLEAN DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL,
        description TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
]

SAMPLE_USERS = [
    {"username": "john_doe", "email": "john@example.com", "status": "active"},
    {"username": "sarah_smith", "email": "sarah@example.com", "status": "active"},
    {"username": "mike_wilson", "email": "mike@example.com", "status": "active"},
    {"username": "emma_davis", "email": "emma@example.com", "status": "inactive"},
    {"username": "alex_jones", "email": "alex@example.com", "status": "active"},
]

SAMPLE_POSTS = [
    {
        "user_id": 1,
        "title": "Getting Started with SQL",
        "content": "A comprehensive guide to SQL basics...",
        "published": 1,
    },
    {
        "user_id": 1,
        "title": "Advanced Query Techniques",
        "content": "Learn about complex joins and subqueries...",
        "published": 1,
    },
    {
        "user_id": 2,
        "title": "Database Design Principles",
        "content": "Best practices for designing databases...",
        "published": 1,
    },
    {
        "user_id": 3,
        "title": "Performance Optimization",
        "content": "Tips for optimizing database performance...",
        "published": 0,
    },
    {
        "user_id": 1,
        "title": "Working with Indexes",
        "content": "Understanding how indexes improve query speed...",
        "published": 1,
    },
]

SAMPLE_CATEGORIES = [
    {"name": "Technology", "description": "Posts related to technology and programming"},
    {"name": "Tutorial", "description": "Step-by-step tutorials and guides"},
    {"name": "Best Practices", "description": "Industry best practices and recommendations"},
]


async def seed_sample_data(connection: DatabaseConnection) -> bool:
    """
    Create the sample tables and fill them when ``users`` is empty.

    Returns:
        True if rows were inserted, False if the store already had users
    """
    async with connection.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(text(statement))

        result = await conn.execute(text("SELECT COUNT(*) FROM users"))
        if result.scalar_one() > 0:
            return False

        await conn.execute(
            text(
                "INSERT INTO users (username, email, status) "
                "VALUES (:username, :email, :status)"
            ),
            SAMPLE_USERS,
        )
        await conn.execute(
            text(
                "INSERT INTO posts (user_id, title, content, published) "
                "VALUES (:user_id, :title, :content, :published)"
            ),
            SAMPLE_POSTS,
        )
        await conn.execute(
            text(
                "INSERT INTO categories (name, description) "
                "VALUES (:name, :description)"
            ),
            SAMPLE_CATEGORIES,
        )

    logger.info(
        f"Seeded sample data: {len(SAMPLE_USERS)} users, "
        f"{len(SAMPLE_POSTS)} posts, {len(SAMPLE_CATEGORIES)} categories"
    )
    return True
