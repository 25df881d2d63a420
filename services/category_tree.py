"""
Category tree service.

Each user owns a forest of lowercase-labeled categories. Four canonical roots
(cuisines, diets, courses, occasions) are seeded with the user and can be
neither renamed, moved nor deleted. Labels are unique among siblings, and a
category's parent always belongs to the same user.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceValidationError,
    UnauthorizedError,
)
from domain.enums import DEFAULT_CATEGORY_LABELS
from domain.models import Category
from domain.schemas import CategoryDetail, CategoryNode, CategoryUpdate
from domain.schemas.category_schemas import LABEL_MAX_LENGTH, normalize_label
from repositories import CategoryRepository, RecipeRepository
from services.base import BaseService


class CategoryTree(BaseService[CategoryRepository]):
    def __init__(self, db: Session):
        super().__init__(db, "recipebox.categories")
        self.repo = CategoryRepository(db)
        self.recipes = RecipeRepository(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, username: str, category_id: int) -> CategoryDetail:
        """Category with its direct child ids and linked recipe ids"""
        category = self._require(username, category_id)
        return CategoryDetail(
            id=category.id,
            username=category.username,
            label=category.label,
            parent_id=category.parent_id,
            children=self.repo.get_child_ids(category.id),
            recipes=self.repo.get_recipe_ids(category.id),
        )

    def get_subtree(self, username: str, category_id: int) -> CategoryNode:
        """Category with every descendant expanded, children in id order"""
        category = self._require(username, category_id)
        categories = self.repo.get_by_owner(username)
        return self._expand(category, self._children_index(categories))

    def get_trees(self, username: str) -> List[CategoryNode]:
        """Every root of the user's forest, fully expanded"""
        categories = self.repo.get_by_owner(username)
        index = self._children_index(categories)
        return [self._expand(root, index) for root in index.get(None, [])]

    def get_roots(self, username: str) -> List[Category]:
        return self.repo.get_roots(username)

    def get_root_ids(self, username: str) -> List[int]:
        return [root.id for root in self.repo.get_roots(username)]

    def get_default_category_ids(self, username: str) -> List[int]:
        """
        Ids of the canonical roots in the order cuisines, diets, courses,
        occasions.

        Raises NotFoundError when a user is missing any of them.
        """
        by_label = {root.label: root.id for root in self.repo.get_roots(username)}
        missing = [label for label in DEFAULT_CATEGORY_LABELS if label not in by_label]
        if missing:
            raise NotFoundError(
                f"Default categories missing for user {username}",
                details={"missing": missing},
            )
        return [by_label[label] for label in DEFAULT_CATEGORY_LABELS]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def seed_defaults(self, username: str) -> List[Category]:
        """Insert the four canonical roots for a new user"""
        with self.transaction("seed_defaults", username=username):
            roots = [Category(username=username, label=label) for label in DEFAULT_CATEGORY_LABELS]
            self.repo.add_all(roots)
        return roots

    def create(self, username: str, label: str, parent_id: Optional[int] = None) -> Category:
        label = normalize_label(label)
        if len(label) > LABEL_MAX_LENGTH:
            raise ServiceValidationError(
                f"Category label is longer than {LABEL_MAX_LENGTH} characters",
                details={"label": label},
            )
        with self.transaction("create_category", username=username, parent_id=parent_id):
            if parent_id is not None:
                self._require_parent(username, parent_id)

            if self.repo.find_sibling(username, parent_id, label) is not None:
                raise ConflictError(
                    f"Category '{label}' already exists under this parent",
                    details={"label": label, "parent_id": parent_id},
                )

            category = self.repo.add(
                Category(username=username, label=label, parent_id=parent_id)
            )

        self.log_info("category_created", username=username, category_id=category.id)
        return category

    def update(self, username: str, category_id: int, data: CategoryUpdate) -> Category:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ServiceValidationError("No fields to update")

        with self.transaction("update_category", username=username, category_id=category_id):
            category = self._require(username, category_id)
            if self._is_canonical_root(category):
                raise ForbiddenError(f"Default category '{category.label}' cannot be changed")

            new_parent = changes.get("parent_id", category.parent_id)
            new_label = changes.get("label") or category.label

            if "parent_id" in changes and new_parent is not None:
                self._require_parent(username, new_parent)
                if new_parent in self._descendant_ids(username, category.id):
                    raise ServiceValidationError(
                        "A category cannot be moved under itself or its descendants",
                        details={"category_id": category.id, "parent_id": new_parent},
                    )

            if self.repo.find_sibling(username, new_parent, new_label, exclude_id=category.id):
                raise ConflictError(
                    f"Category '{new_label}' already exists under this parent",
                    details={"label": new_label, "parent_id": new_parent},
                )

            category.label = new_label
            category.parent_id = new_parent
            self.db.flush()

        self.log_info("category_updated", username=username, category_id=category_id)
        return category

    def remove(self, username: str, category_id: int) -> None:
        """Delete a category; descendants and recipe links cascade"""
        with self.transaction("remove_category", username=username, category_id=category_id):
            category = self._require(username, category_id)
            if self._is_canonical_root(category):
                raise ForbiddenError(f"Default category '{category.label}' cannot be deleted")
            self.repo.delete(category)
        self.log_info("category_removed", username=username, category_id=category_id)

    def link_recipe(self, username: str, category_id: int, recipe_id: int) -> None:
        with self.transaction("link_recipe", category_id=category_id, recipe_id=recipe_id):
            self._require(username, category_id)
            if self.recipes.get_for_owner(username, recipe_id) is None:
                raise NotFoundError(f"Recipe {recipe_id} not found")
            if self.repo.get_link(category_id, recipe_id) is not None:
                raise ConflictError(
                    "Recipe is already in this category",
                    details={"category_id": category_id, "recipe_id": recipe_id},
                )
            self.repo.add_link(category_id, recipe_id)

    def unlink_recipe(self, username: str, category_id: int, recipe_id: int) -> None:
        with self.transaction("unlink_recipe", category_id=category_id, recipe_id=recipe_id):
            self._require(username, category_id)
            link = self.repo.get_link(category_id, recipe_id)
            if link is None:
                raise NotFoundError(
                    f"Recipe {recipe_id} is not in category {category_id}"
                )
            self.repo.delete(link)

    def create_and_link(
        self, username: str, recipe_id: int, labels: Iterable[str], parent_id: int
    ) -> List[Category]:
        """
        Link a recipe to children of ``parent_id`` named by ``labels``.

        Existing children are reused; missing ones are created. Labels are
        normalized and de-duplicated first.
        """
        wanted: List[str] = []
        for label in labels:
            label = normalize_label(label)
            if label and label not in wanted:
                wanted.append(label)
        if not wanted:
            return []

        with self.transaction("create_and_link", recipe_id=recipe_id, parent_id=parent_id):
            existing = {c.label: c for c in self.repo.get_children(username, parent_id)}
            linked = []
            for label in wanted:
                category = existing.get(label)
                if category is None:
                    category = self.create(username, label, parent_id)
                if self.repo.get_link(category.id, recipe_id) is None:
                    self.repo.add_link(category.id, recipe_id)
                linked.append(category)
        return linked

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, username: str, category_id: int) -> Category:
        category = self.repo.get_for_owner(username, category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        return category

    def _require_parent(self, username: str, parent_id: int) -> Category:
        parent = self.repo.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError(f"Parent category {parent_id} not found")
        if parent.username != username:
            raise UnauthorizedError("Parent category belongs to another user")
        return parent

    @staticmethod
    def _is_canonical_root(category: Category) -> bool:
        return category.parent_id is None and category.label in DEFAULT_CATEGORY_LABELS

    @staticmethod
    def _children_index(categories: List[Category]) -> Dict[Optional[int], List[Category]]:
        index: Dict[Optional[int], List[Category]] = defaultdict(list)
        for category in categories:
            index[category.parent_id].append(category)
        return index

    @staticmethod
    def _expand(root: Category, index: Dict[Optional[int], List[Category]]) -> CategoryNode:
        """
        Build the nested subtree under ``root`` without recursion.

        Nodes already placed are skipped, so cyclic parent links in bad data
        cannot loop forever.
        """
        top = CategoryNode(
            id=root.id, username=root.username, label=root.label, parent_id=root.parent_id
        )
        visited = {root.id}
        stack = [(root.id, top)]
        while stack:
            category_id, node = stack.pop()
            for child in index.get(category_id, []):
                if child.id in visited:
                    continue
                visited.add(child.id)
                child_node = CategoryNode(
                    id=child.id,
                    username=child.username,
                    label=child.label,
                    parent_id=child.parent_id,
                )
                node.children.append(child_node)
                stack.append((child.id, child_node))
        return top

    def _descendant_ids(self, username: str, category_id: int) -> set:
        """``category_id`` plus every id below it"""
        index = self._children_index(self.repo.get_by_owner(username))
        found = {category_id}
        stack = [category_id]
        while stack:
            for child in index.get(stack.pop(), []):
                if child.id not in found:
                    found.add(child.id)
                    stack.append(child.id)
        return found
