"""
The `database` package is responsible for all interactions with the portal's database.
It provides configuration, entity definitions, CRUD operations, and the service
functions that the API routers call.

Contents:
    - config:
        Settings and the SQLAlchemy engine / declarative base.

    - entities:
        SQLAlchemy entity models (users, posts, answers, comments, collections,
        rooms, polls, projects).

    - daos:
        Data Access Objects (DAOs) providing CRUD operations for the entities.

    - core:
        Service functions that connect the routers with the database, enforce
        the business rules and serialize entities into API payloads.

    - helpers:
        Transaction management and shared column defaults.
"""
