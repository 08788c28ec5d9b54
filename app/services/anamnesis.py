"""
GymTracker Pro - Anamnesis Service.

Stores the onboarding questionnaire. With Supabase the answers go to the
``anamnesis`` table (one row per user); in local mode only the completion
marker is kept in storage.
"""

from datetime import datetime, timezone
from typing import Optional
import logging

from app.schemas.anamnesis import AnamnesisAnswers
from app.services.auth_backend import AuthBackend
from app.services.local_auth import LocalAuthBackend
from app.services.storage import KeyValueStorage
from app.services.supabase_auth import SupabaseAuthAdapter
from app.utils.errors import ProviderError, ValidationError

logger = logging.getLogger(__name__)

ANAMNESIS_TABLE = "anamnesis"
ANAMNESIS_KEY = "anamnesis_completed"


class AnamnesisService:
    """Persist and look up questionnaire submissions."""

    def __init__(
        self,
        *,
        client=None,
        storage: Optional[KeyValueStorage] = None,
        key: str = ANAMNESIS_KEY
    ):
        """
        Args:
            client: Async Supabase client; when given, the table is used.
            storage: Key/value storage for local mode.
            key: Storage key of the local completion marker.
        """
        if client is None and storage is None:
            raise ValueError("AnamnesisService needs a Supabase client or a storage")
        self.client = client
        self.storage = storage
        self.key = key

    @classmethod
    def for_backend(
        cls,
        backend: AuthBackend,
        storage: Optional[KeyValueStorage] = None,
        key: str = ANAMNESIS_KEY
    ) -> "AnamnesisService":
        """Use the Supabase client of ``backend`` when it has one, else ``storage``."""
        if isinstance(backend, SupabaseAuthAdapter):
            return cls(client=backend.client, key=key)
        if storage is None and isinstance(backend, LocalAuthBackend):
            storage = backend.session_store.storage
        return cls(storage=storage, key=key)

    async def is_completed(self, user_id: str) -> bool:
        """
        Check whether ``user_id`` already submitted the questionnaire.

        Provider errors are logged and reported as not completed.
        """
        if self.client is None:
            return self.storage.get_item(self.key) == user_id

        try:
            response = await (
                self.client.table(ANAMNESIS_TABLE)
                .select("id")
                .eq("user_id", user_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.warning(f"Anamnesis lookup failed for {user_id}: {e}")
            return False
        # maybe_single() may return None instead of an empty response
        return bool(response is not None and response.data)

    async def submit(self, user_id: str, answers: AnamnesisAnswers) -> None:
        """
        Save the answers of ``user_id``.

        Raises:
            ValidationError: Not all three terms were accepted.
            ProviderError: The upsert failed.
        """
        if not answers.terms_accepted:
            raise ValidationError("All three terms must be accepted to submit the anamnesis.")

        if self.client is None:
            self.storage.set_item(self.key, user_id)
            return

        try:
            await (
                self.client.table(ANAMNESIS_TABLE)
                .upsert(
                    {
                        "user_id": user_id,
                        "answers": answers.model_dump(mode="json", by_alias=True),
                        "updated_at": datetime.now(timezone.utc).isoformat(),
                    },
                    on_conflict="user_id",
                )
                .execute()
            )
        except Exception as e:
            raise ProviderError(message=getattr(e, "message", None) or str(e)) from e
        logger.info(f"Anamnesis saved for {user_id}")
