"""
User profile models
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping

from app.services.recommendations.models.enums import SkinConcern, SkinType
from app.services.recommendations.models.product import parse_skin_concerns


@dataclass(frozen=True)
class UserProfile:
    """Skin profile of a user, read-only to the scoring engines"""
    user_id: str
    skin_type: SkinType
    skin_concerns: FrozenSet[SkinConcern] = field(default_factory=frozenset)
    sustainability_preference: bool = False

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "UserProfile":
        """Build a profile from a profile-store document"""
        user_id = doc.get("user", doc.get("user_id"))
        if user_id is None:
            raise ValueError("Profile has no owning user")
        skin_type = doc.get("skinType", doc.get("skin_type"))
        if skin_type is None:
            raise ValueError(f"Profile of user {user_id} has no skin type")
        return cls(
            user_id=str(user_id),
            skin_type=SkinType(skin_type),
            skin_concerns=parse_skin_concerns(doc.get("skinConcerns", doc.get("skin_concerns"))),
            sustainability_preference=bool(
                doc.get("sustainabilityPreference", doc.get("sustainability_preference", False))
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "user_id": self.user_id,
            "skin_type": self.skin_type.value,
            "skin_concerns": sorted(c.value for c in self.skin_concerns),
            "sustainability_preference": self.sustainability_preference,
        }
