"""Repositories for role assignments and student profiles."""

from koperasi_storefront.backend.backend_client import PROFILES, USER_ROLES
from koperasi_storefront.backend.document_store import DocumentStore
from koperasi_storefront.models.auth_models import ADMIN_ROLE, Profile


class RoleRepository:
    """Lookup of role assignments linking an actor to a privilege label."""

    def __init__(self, documents: DocumentStore, collection: str = USER_ROLES) -> None:
        """Initialize repository.

        Args:
            documents: Document store of the hosted backend
            collection: Name of the role assignment collection
        """
        self.documents = documents
        self.collection = collection

    def has_role(self, user_id: str, role: str = ADMIN_ROLE) -> bool:
        """Check whether an actor holds a role.

        Args:
            user_id: Actor identifier
            role: Role label

        Returns:
            bool: True if a matching assignment exists
        """
        records = self.documents.list_records(
            self.collection, filters={"user_id": user_id, "role": role}, limit=1
        )
        return len(records) > 0


class ProfileRepository:
    """Student profiles, stored under the actor id."""

    def __init__(self, documents: DocumentStore, collection: str = PROFILES) -> None:
        """Initialize repository.

        Args:
            documents: Document store of the hosted backend
            collection: Name of the profiles collection
        """
        self.documents = documents
        self.collection = collection

    def create_profile(self, profile: Profile) -> Profile:
        """Store a profile keyed by its actor id.

        Args:
            profile: Profile to store

        Returns:
            Profile: The stored profile
        """
        self.documents.create_record(
            self.collection, profile.model_dump(), record_id=profile.user_id
        )
        return profile
