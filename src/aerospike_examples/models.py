"""
Aerospike Query Examples - Data Models

Copyright 2025 Aerospike Query Examples contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Aerospike key as accepted by the client: (namespace, set, primary key)
KeyTuple = Tuple[str, str, Any]
BinsDict = Dict[str, Any]


class ProfileRecord(BaseModel):
    """User profile stored in the example set"""
    key: int = Field(..., ge=0, description="Integer primary key")
    username: str
    password: str

    model_config = ConfigDict(frozen=True)

    @field_validator('username', 'password')
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Profile fields cannot be empty")
        return v

    def bins(self) -> BinsDict:
        """Bins written for this profile"""
        return {"username": self.username, "password": self.password}

    def as_key(self, namespace: str, set_name: str) -> KeyTuple:
        return (namespace, set_name, self.key)


SAMPLE_PROFILES: Tuple[ProfileRecord, ...] = (
    ProfileRecord(key=1, username="Charlie", password="cpass"),
    ProfileRecord(key=2, username="Bill", password="hknfpkj"),
    ProfileRecord(key=3, username="Doug", password="dj6554"),
    ProfileRecord(key=4, username="Mary", password="ghjks"),
    ProfileRecord(key=5, username="Julie", password="zzxzxvv"),
)


def sample_keys(namespace: str, set_name: str) -> List[KeyTuple]:
    """Keys of all sample profiles in the given namespace and set"""
    return [profile.as_key(namespace, set_name) for profile in SAMPLE_PROFILES]
