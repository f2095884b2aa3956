"""Simple data models for AWS resource tag management."""

from dataclasses import dataclass, field
from typing import Dict, List

from webhost_ops.core.constants import MANAGED_BY_KEY, MANAGED_BY_VALUE, STACK_TAG_KEY


@dataclass
class TagInfo:
    """Tags applied to every resource of a stack."""
    name: str
    stack: str
    custom_tags: Dict[str, str] = field(default_factory=dict)

    @property
    def all_tags(self) -> Dict[str, str]:
        """Get all tags combined."""
        tags = dict(self.custom_tags)
        tags.update({
            "Name": self.name,
            STACK_TAG_KEY: self.stack,
            MANAGED_BY_KEY: MANAGED_BY_VALUE,
        })
        return tags

    def to_aws_tags(self) -> List[Dict[str, str]]:
        """Tags in the Key/Value list form used by EC2 and IAM."""
        return [{"Key": k, "Value": str(v)} for k, v in self.all_tags.items()]

    @classmethod
    def from_aws_tags(cls, tags: List[Dict[str, str]]) -> "TagInfo":
        """Create from an AWS Key/Value tag list."""
        tag_map = {t["Key"]: t.get("Value", "") for t in tags or [] if t.get("Key")}
        known_tags = {"Name", STACK_TAG_KEY, MANAGED_BY_KEY}
        return cls(
            name=tag_map.get("Name", ""),
            stack=tag_map.get(STACK_TAG_KEY, ""),
            custom_tags={k: v for k, v in tag_map.items() if k not in known_tags},
        )
