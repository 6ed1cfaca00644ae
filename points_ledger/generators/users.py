"""User payload generator."""

import re
from typing import Any

from points_ledger.generators.base import BaseGenerator


class UserGenerator(BaseGenerator):
    """Generate ``register_user`` payloads."""

    def generate(self) -> dict[str, Any]:
        first = self.fake.first_name()
        last = self.fake.last_name()
        handle = re.sub(r"[^a-z0-9.]", "", f"{first}.{last}".lower())
        username = f"{handle}{self.fake.random_int(1, 999)}"
        return {
            "username": username,
            "name": f"{first} {last}",
            "email": f"{username}@{self.fake.free_email_domain()}",
            "preferences": {"notifications": self.fake.boolean(chance_of_getting_true=80)},
        }
