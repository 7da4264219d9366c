"""
Knowledge Portal.

Server side: `portal.main` (FastAPI app), `portal.api`, `portal.database`,
`portal.crypt`. Client side: `portal.client`.
"""
