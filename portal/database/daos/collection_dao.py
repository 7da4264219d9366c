"""
Collection DAO

Purpose
-------
Data-access layer for user-owned `Collection` records. Every lookup is
scoped to the owner, so a collection id belonging to somebody else behaves
exactly like an unknown id.

Error Handling
--------------
- Methods catch generic `Exception`, log the error, and re-raise.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from portal.database.entities.collection import Collection

logger = logging.getLogger(__name__)


class CollectionDao:
    """
    Data Access Object (DAO) for managing Collection entities.
    """

    def createCollection(self, session: Session, collection: Collection) -> Collection:
        try:
            session.add(collection)
            session.flush()
            return collection
        except Exception as e:
            logger.error(f"Error in CollectionDao.createCollection. Error: {e}")
            raise e

    def fetchCollectionsByUser(self, session: Session, user_id: str) -> List[Collection]:
        """
        Fetch the collections owned by `user_id` in creation order.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : str
            Owner id.

        Returns
        -------
        list[Collection]
        """
        try:
            return (
                session.query(Collection)
                .filter(Collection.user_id == user_id)
                .order_by(Collection.created_at)
                .all()
            )
        except Exception as e:
            logger.error(f"Error in CollectionDao.fetchCollectionsByUser. Error: {e}")
            raise e

    def fetchUserCollection(self, session: Session, user_id: str, collection_id: str) -> Optional[Collection]:
        try:
            return (
                session.query(Collection)
                .filter(Collection.id == collection_id, Collection.user_id == user_id)
                .first()
            )
        except Exception as e:
            logger.error(f"Error in CollectionDao.fetchUserCollection. Error: {e}")
            raise e

    def deleteCollection(self, session: Session, collection: Collection) -> None:
        try:
            session.delete(collection)
            session.flush()
        except Exception as e:
            logger.error(f"Error in CollectionDao.deleteCollection. Error: {e}")
            raise e
