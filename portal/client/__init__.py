"""
Portal client
=============

Python client for the Knowledge Portal API: the HTTP wrapper (`api`), the
auth session store (`session`), view controllers (`detail`, `lists`),
presentational widgets (`poll_widget`, `toc`, `sidebar`, `helpers`), the
PDF export (`pdf_export`), the profile editor (`profile`) and the moderation
queue (`lists.ModerationQueueController`).

Typical wiring::

    storage = JsonFileStorage(client_settings.STORAGE_PATH)
    session = AuthSession(storage)
    api = ApiClient(client_settings.API_URL, token_provider=session.get_token)
    ui = UserInterface()
    detail = PostDetailController(post_id, session, api, ui)
    detail.load()
"""
