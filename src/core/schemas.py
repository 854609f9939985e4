"""Core data models for the random users client.

All models mirror the randomuser.me wire shape and are frozen. A UserRecord
compares and hashes by its identity key only, so two fetches of the same person
stay equal even if the backend regenerated some of their details.
"""

from pydantic import BaseModel, ConfigDict, Field, RootModel, StrictInt, StrictStr


class Name(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    first: str
    last: str


class Street(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    name: str


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: str
    longitude: str


class Timezone(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset: str
    description: str


class Postcode(RootModel[StrictStr | StrictInt]):
    """Postcode as sent by the API: some nationalities use text, others numbers.

    The wire type is kept so it round-trips unchanged; consumers read ``text``.
    """

    model_config = ConfigDict(frozen=True)

    @property
    def text(self) -> str:
        return str(self.root)

    def __str__(self) -> str:
        return self.text


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: Street
    city: str
    state: str
    country: str
    postcode: Postcode
    coordinates: Coordinates
    timezone: Timezone


class Login(BaseModel):
    model_config = ConfigDict(frozen=True)

    uuid: str
    username: str
    password: str = ""
    salt: str = ""
    md5: str = ""
    sha1: str = ""
    sha256: str = ""


class DatedAge(BaseModel):
    """A timestamp with its precomputed age in years (dob, registered)."""

    model_config = ConfigDict(frozen=True)

    date: str
    age: int


class UserId(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    value: str | None = None


class Picture(BaseModel):
    model_config = ConfigDict(frozen=True)

    large: str
    medium: str
    thumbnail: str


class UserRecord(BaseModel):
    """One randomly generated user profile."""

    model_config = ConfigDict(frozen=True)

    gender: str
    name: Name
    location: Location
    email: str
    login: Login
    dob: DatedAge
    registered: DatedAge
    phone: str
    cell: str
    id: UserId = Field(default_factory=UserId)
    picture: Picture
    nat: str

    @property
    def identity_key(self) -> str:
        return f"{self.email}_{self.login.username}"

    @property
    def full_name(self) -> str:
        return f"{self.name.title} {self.name.first} {self.name.last}".strip()

    @property
    def full_address(self) -> str:
        loc = self.location
        return (
            f"{loc.street.number} {loc.street.name}, {loc.city}, {loc.state}, "
            f"{loc.country}, {loc.postcode.text}"
        )

    @property
    def age(self) -> int:
        return self.dob.age

    @property
    def initials(self) -> str:
        parts = [self.name.first, self.name.last]
        return "".join(p[0].upper() for p in parts if p)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserRecord):
            return NotImplemented
        return self.identity_key == other.identity_key

    def __hash__(self) -> int:
        return hash(self.identity_key)


class PageInfo(BaseModel):
    """Echo-back metadata of a page response."""

    model_config = ConfigDict(frozen=True)

    seed: str
    results: int
    page: int
    version: str = ""


class Page(BaseModel):
    """One page of users plus the seed the server actually used."""

    model_config = ConfigDict(frozen=True)

    results: list[UserRecord]
    info: PageInfo

    @property
    def seed(self) -> str:
        return self.info.seed
