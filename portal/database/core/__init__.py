"""
The `core` package holds the service layer between the FastAPI routers and
the DAOs.

Every public function is decorated with `@transactional`, takes keyword
arguments only, raises `HTTPException` for domain failures and returns
JSON-ready payloads.

Contents
--------
- serializers: entity → payload conversion (`_id`, camelCase, ISO timestamps)
- auth_funcs: register, password login, Google sign-in, welcome e-mails
- post_funcs: posts, likes, bookmarks, reports, AI summary state, answers, comments
- user_funcs: profiles, follow graph, bookmarks list, collections
- community_funcs: rooms and polls
- project_funcs: project gallery
- moderation_funcs: moderation queue and approve / reject (moderators only)
"""
