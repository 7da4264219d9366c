"""
Data access objects
===================

One DAO per aggregate. Each method takes the caller's `session` as a keyword
argument and only stages or queries rows; committing and rolling back is the
job of the `@transactional` service function that owns the session. DAOs log
a failure and re-raise it unchanged.

Contents
--------
- UserDao: create users (password hashing), look up by id / e-mail / Google subject
- PostDao: create, delete, feed query with visibility and moderation filters
- AnswerDao / CommentDao: answers, post comments and project comments
- CollectionDao: owner-scoped collections
- CommunityDao: rooms and polls
- ProjectDao: project gallery
"""
