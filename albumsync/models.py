"""
Record types shared by the import pipeline.

Remote API items and takeout sidecars are parsed into their own types and
only merged into a MediaItem by the normalizer. Persisted shapes use the
camelCase keys the catalog stores.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

PERSON_KEYWORD_TYPE = "person"
USER_KEYWORD_TYPE = "user"


@dataclass
class GeoData:
    latitude: float
    longitude: float
    altitude: float = 0.0
    latitude_span: float = 0.0
    longitude_span: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["GeoData"]:
        if not data:
            return None
        if data.get("latitude") is None or data.get("longitude") is None:
            return None
        return cls(
            latitude=data["latitude"],
            longitude=data["longitude"],
            altitude=data.get("altitude") or 0.0,
            latitude_span=data.get("latitudeSpan") or 0.0,
            longitude_span=data.get("longitudeSpan") or 0.0,
        )

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "latitudeSpan": self.latitude_span,
            "longitudeSpan": self.longitude_span,
        }


@dataclass
class Person:
    name: str


def people_from_list(data: Optional[list]) -> Optional[List[Person]]:
    if data is None:
        return None
    return [Person(name=p["name"]) for p in data if p.get("name")]


@dataclass
class RemoteMediaItem:
    """A mediaItem as returned by the Google Photos API."""
    id: str
    filename: str
    product_url: Optional[str] = None
    base_url: Optional[str] = None
    mime_type: Optional[str] = None
    creation_time: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None

    @classmethod
    def from_api(cls, item: dict) -> "RemoteMediaItem":
        metadata = item.get("mediaMetadata", {})
        return cls(
            id=item["id"],
            filename=item["filename"],
            product_url=item.get("productUrl"),
            base_url=item.get("baseUrl"),
            mime_type=item.get("mimeType"),
            creation_time=metadata.get("creationTime"),
            width=metadata.get("width"),
            height=metadata.get("height"),
        )


@dataclass
class TakeoutSidecar:
    """The per-file <name>.json metadata record from a takeout archive."""
    title: Optional[str] = None
    description: Optional[str] = None
    geo_data: Optional[GeoData] = None
    people: Optional[List[Person]] = None

    @classmethod
    def from_json(cls, data: dict) -> "TakeoutSidecar":
        return cls(
            title=data.get("title"),
            description=data.get("description"),
            geo_data=GeoData.from_dict(data.get("geoData")),
            people=people_from_list(data.get("people")),
        )

    def person_names(self) -> List[str]:
        return [p.name for p in self.people or []]


@dataclass
class MediaItem:
    id: str
    file_name: str
    album_id: Optional[str] = None
    file_path: str = ""
    remote_product_url: Optional[str] = None
    remote_byte_url_base: Optional[str] = None
    mime_type: Optional[str] = None
    creation_time_utc: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: Optional[int] = None
    description: Optional[str] = None
    geo_data: Optional[GeoData] = None
    people: Optional[List[Person]] = None
    keyword_tag_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "albumId": self.album_id,
            "filePath": self.file_path,
            "productUrl": self.remote_product_url,
            "baseUrl": self.remote_byte_url_base,
            "mimeType": self.mime_type,
            "creationTime": self.creation_time_utc,
            "width": self.width,
            "height": self.height,
            "orientation": self.orientation,
            "description": self.description,
            "geoData": self.geo_data.to_dict() if self.geo_data else None,
            "people": [{"name": p.name} for p in self.people] if self.people is not None else None,
            "keywordNodeIds": list(self.keyword_tag_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MediaItem":
        return cls(
            id=data["id"],
            file_name=data["fileName"],
            album_id=data.get("albumId"),
            file_path=data.get("filePath") or "",
            remote_product_url=data.get("productUrl"),
            remote_byte_url_base=data.get("baseUrl"),
            mime_type=data.get("mimeType"),
            creation_time_utc=data.get("creationTime"),
            width=data.get("width"),
            height=data.get("height"),
            orientation=data.get("orientation"),
            description=data.get("description"),
            geo_data=GeoData.from_dict(data.get("geoData")),
            people=people_from_list(data.get("people")),
            keyword_tag_ids=list(data.get("keywordNodeIds") or []),
        )


@dataclass
class Keyword:
    keyword_id: str
    label: str
    type: str = USER_KEYWORD_TYPE

    def to_dict(self) -> dict:
        return {"keywordId": self.keyword_id, "label": self.label, "type": self.type}

    @classmethod
    def from_dict(cls, data: dict) -> "Keyword":
        return cls(data["keywordId"], data["label"], data.get("type", USER_KEYWORD_TYPE))


@dataclass
class KeywordNode:
    node_id: str
    keyword_id: str
    parent_node_id: str = ""
    children_node_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodeId": self.node_id,
            "keywordId": self.keyword_id,
            "parentNodeId": self.parent_node_id,
            "childrenNodeIds": list(self.children_node_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "KeywordNode":
        return cls(
            data["nodeId"],
            data["keywordId"],
            data.get("parentNodeId") or "",
            list(data.get("childrenNodeIds") or []),
        )


@dataclass
class KeywordData:
    keywords: List[Keyword]
    keyword_nodes: List[KeywordNode]
    root_node_id: Optional[str] = None


@dataclass
class PersonKeywordResult:
    """Outcome of one auto-tagging pass."""
    created_keywords: List[Keyword] = field(default_factory=list)
    created_nodes: List[KeywordNode] = field(default_factory=list)
    node_id_by_name: Dict[str, str] = field(default_factory=dict)


@dataclass
class Takeout:
    id: str
    label: str
    album_name: str
    path: str

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "albumName": self.album_name, "path": self.path}

    @classmethod
    def from_dict(cls, data: dict) -> "Takeout":
        return cls(data["id"], data["label"], data["albumName"], data["path"])
