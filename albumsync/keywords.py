import uuid
from typing import Dict, Iterable

from loguru import logger

from albumsync.config import (
    PEOPLE_KEYWORD_ID,
    PEOPLE_KEYWORD_NODE_ID,
    ROOT_KEYWORD_ID,
    ROOT_KEYWORD_NODE_ID,
)
from albumsync.local_store import Catalog
from albumsync.models import (
    PERSON_KEYWORD_TYPE,
    Keyword,
    KeywordData,
    KeywordNode,
    PersonKeywordResult,
)


class KeywordManager:
    """
    Keyword vocabulary and tree: explicit administration plus the
    auto-generated "person" keywords derived from takeout sidecars.
    """

    def __init__(self, catalog: Catalog, people_node_id: str = PEOPLE_KEYWORD_NODE_ID):
        self.catalog = catalog
        self.people_node_id = people_node_id

    def initialize_keyword_tree(self):
        """
        Create the 'All' root and the 'People' node under it. Safe to call
        again: nodes that already exist are left alone.
        """
        root = self.catalog.get_keyword_node(ROOT_KEYWORD_NODE_ID)
        if root is None:
            self.catalog.upsert_keyword(Keyword(ROOT_KEYWORD_ID, "All", "tbd"))
            root = KeywordNode(ROOT_KEYWORD_NODE_ID, ROOT_KEYWORD_ID)
            self.catalog.upsert_keyword_node(root)

        if self.catalog.get_keyword_node(PEOPLE_KEYWORD_NODE_ID) is None:
            self.catalog.upsert_keyword(Keyword(PEOPLE_KEYWORD_ID, "People", "tbd"))
            self.catalog.upsert_keyword_node(
                KeywordNode(PEOPLE_KEYWORD_NODE_ID, PEOPLE_KEYWORD_ID, ROOT_KEYWORD_NODE_ID)
            )

        if PEOPLE_KEYWORD_NODE_ID not in root.children_node_ids:
            root.children_node_ids.append(PEOPLE_KEYWORD_NODE_ID)
            self.catalog.upsert_keyword_node(root)

        if self.catalog.get_root_node_id() is None:
            self.catalog.set_root_node_id(ROOT_KEYWORD_NODE_ID)

    def add_keyword(self, keyword: Keyword) -> str:
        self.catalog.upsert_keyword(keyword)
        return keyword.keyword_id

    def add_keyword_node(self, node: KeywordNode) -> str:
        self.catalog.upsert_keyword_node(node)
        return node.node_id

    def update_keyword_node(self, node: KeywordNode) -> KeywordNode:
        if self.catalog.get_keyword_node(node.node_id) is None:
            raise KeyError(f"No keyword node {node.node_id}")
        self.catalog.upsert_keyword_node(node)
        return node

    def set_root_node(self, node_id: str):
        self.catalog.set_root_node_id(node_id)

    def get_all_keyword_data(self) -> KeywordData:
        return KeywordData(
            keywords=self.catalog.list_keywords(),
            keyword_nodes=self.catalog.list_keyword_nodes(),
            root_node_id=self.catalog.get_root_node_id(),
        )

    def person_node_ids_by_name(self) -> Dict[str, str]:
        """Existing person keyword nodes under the people node, by label."""
        lookup = {}
        for node in self.catalog.list_keyword_nodes():
            if node.parent_node_id != self.people_node_id:
                continue
            keyword = self.catalog.get_keyword(node.keyword_id)
            if keyword is not None and keyword.type == PERSON_KEYWORD_TYPE:
                lookup.setdefault(keyword.label, node.node_id)
        return lookup

    def ensure_person_keywords(self, names: Iterable[str]) -> PersonKeywordResult:
        """
        Make sure every name has a person keyword and node under the people
        node. Returns the newly created keywords/nodes and a name -> node id
        lookup covering all requested names. An empty name set writes nothing.
        """
        names = set(names)
        result = PersonKeywordResult()
        if not names:
            return result

        parent = self.catalog.get_keyword_node(self.people_node_id)
        if parent is None:
            logger.info("People keyword node missing; initializing keyword tree")
            self.initialize_keyword_tree()
            parent = self.catalog.get_keyword_node(self.people_node_id)

        existing = self.person_node_ids_by_name()

        for name in sorted(names):
            if name in existing:
                result.node_id_by_name[name] = existing[name]
                continue

            keyword = Keyword(str(uuid.uuid4()), name, PERSON_KEYWORD_TYPE)
            node = KeywordNode(str(uuid.uuid4()), keyword.keyword_id, parent.node_id)
            self.catalog.upsert_keyword(keyword)
            self.catalog.upsert_keyword_node(node)
            parent.children_node_ids.append(node.node_id)

            result.created_keywords.append(keyword)
            result.created_nodes.append(node)
            result.node_id_by_name[name] = node.node_id

        if result.created_nodes:
            self.catalog.upsert_keyword_node(parent)
            logger.info(f"Created {len(result.created_keywords)} person keywords")

        return result
