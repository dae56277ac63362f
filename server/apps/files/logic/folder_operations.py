"""Business logic for folder hierarchy operations.

Folders are addressed by id and always scoped to their owner. Tree
walks (ancestry, subtree enumeration) are iterative and guard against
cycles, so a corrupted hierarchy can never loop forever.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import (  # noqa: WPS347
    Count,
    QuerySet,
    RestrictedError,
    Sum,
)

from server.apps.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from server.apps.files.infrastructure.metadata import clean_name
from server.apps.files.logic.quota_operations import (
    decrement_usage,
    lock_quota,
)
from server.apps.files.models import ROOT_FOLDER_NAME, File, Folder

# User type for Django's dynamic user model
_User = Any

_FOLDER_NAME_LABEL = 'Folder name'
_PATH_SEPARATOR = '/'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Breadcrumb:
    """One step of the trail from the root to a folder."""

    id: int | None
    name: str


@dataclass
class FolderContents:
    """A folder with its direct children, read at one point in time."""

    folder: Folder
    path: str
    files: list[File] = field(default_factory=list)
    subfolders: list[Folder] = field(default_factory=list)


@dataclass(frozen=True)
class FolderDeletion:
    """Outcome of a recursive folder delete."""

    folder_count: int
    file_count: int
    freed_bytes: int


def with_counts(queryset: QuerySet[Folder]) -> QuerySet[Folder]:
    """Annotate folders with their direct child counts.

    Args:
        queryset: Folders to annotate.

    Returns:
        QuerySet whose items carry ``file_count`` and ``subfolder_count``.
    """
    return queryset.select_related('parent').annotate(
        file_count=Count('files', distinct=True),
        subfolder_count=Count('subfolders', distinct=True),
    )


def get_owned_folder(
    user: _User,
    folder_id: int,
    *,
    lock: bool = False,
) -> Folder:
    """Fetch a folder the caller owns.

    Args:
        user: Caller.
        folder_id: Folder to fetch.
        lock: Take a row lock (inside ``transaction.atomic`` only).

    Returns:
        Folder instance.

    Raises:
        NotFoundError: If the folder does not exist.
        ForbiddenError: If the folder belongs to another user.
    """
    queryset = Folder.objects.select_related('parent')
    if lock:
        queryset = queryset.select_for_update(of=('self',))
    try:
        folder = queryset.get(id=folder_id)
    except Folder.DoesNotExist as error:
        raise NotFoundError('Folder not found') from error

    if folder.user_id != user.id:
        logger.warning(
            'User %s tried to access folder %d of another user',
            user.username,
            folder_id,
        )
        raise ForbiddenError('You do not have access to this folder')
    return folder


def resolve_folder(user: _User, folder_id: int | None) -> Folder | None:
    """Resolve an optional folder reference (a parent or upload target).

    Args:
        user: Caller.
        folder_id: Folder id, or None for the root.

    Returns:
        Folder instance, or None for the root.

    Raises:
        NotFoundError: If the folder does not exist or is not the caller's.
    """
    if folder_id is None:
        return None
    try:
        return Folder.objects.get(id=folder_id, user=user)
    except Folder.DoesNotExist as error:
        raise NotFoundError('Folder not found') from error


def create_folder(
    user: _User,
    name: str | None,
    parent_id: int | None = None,
) -> Folder:
    """Create a folder under the given parent (or at the root).

    Args:
        user: Owner of the new folder.
        name: Folder name.
        parent_id: Parent folder id, None for the root.

    Returns:
        Created Folder instance.

    Raises:
        InvalidInputError: If the name is invalid.
        NotFoundError: If the parent is not one of the caller's folders.
        ConflictError: If a sibling already has this name.
    """
    folder_name = clean_name(name, _FOLDER_NAME_LABEL)

    try:
        with transaction.atomic():
            parent = _lock_parent(user, parent_id)
            _ensure_unique_name(user, parent, folder_name)
            folder = Folder.objects.create(
                user=user,
                name=folder_name,
                parent=parent,
            )
    except IntegrityError as error:
        # A concurrent create won the race for this name
        raise _name_conflict(folder_name) from error

    logger.info(
        'Folder created: user=%s, folder=%d, name=%s',
        user.username,
        folder.id,
        folder_name,
    )
    return folder


def get_folder(user: _User, folder_id: int) -> FolderContents:
    """Read a folder together with its files and subfolders.

    The folder row is locked for the duration of the read, so the two
    child collections come from the same point in time and a concurrent
    recursive delete is either not yet visible or reported as NotFound.

    Args:
        user: Caller.
        folder_id: Folder to read.

    Returns:
        FolderContents with the folder, its path and direct children.
    """
    with transaction.atomic():
        folder = get_owned_folder(user, folder_id, lock=True)
        path = get_folder_path(folder)
        files = list(
            File.objects.filter(user=user, folder=folder).select_related(
                'folder',
            ),
        )
        subfolders = list(
            with_counts(Folder.objects.filter(user=user, parent=folder)),
        )

    logger.debug(
        'Folder read: folder=%d, files=%d, subfolders=%d',
        folder.id,
        len(files),
        len(subfolders),
    )
    return FolderContents(
        folder=folder,
        path=path,
        files=files,
        subfolders=subfolders,
    )


def list_root_folders(user: _User) -> QuerySet[Folder]:
    """List the caller's top-level folders.

    Args:
        user: Caller.

    Returns:
        QuerySet of root folders with child counts.
    """
    return with_counts(Folder.objects.filter(user=user, parent__isnull=True))


def list_subfolders(user: _User, folder_id: int) -> QuerySet[Folder]:
    """List the direct subfolders of one of the caller's folders.

    Args:
        user: Caller.
        folder_id: Parent folder.

    Returns:
        QuerySet of subfolders with child counts.
    """
    parent = get_owned_folder(user, folder_id)
    return with_counts(Folder.objects.filter(user=user, parent=parent))


def rename_folder(user: _User, folder_id: int, new_name: str | None) -> Folder:
    """Rename a folder, keeping sibling names unique.

    Args:
        user: Caller.
        folder_id: Folder to rename.
        new_name: New name.

    Returns:
        Updated Folder instance.

    Raises:
        InvalidInputError: If the name is invalid.
        ConflictError: If a sibling already has this name.
    """
    folder_name = clean_name(new_name, _FOLDER_NAME_LABEL)

    try:
        with transaction.atomic():
            folder = get_owned_folder(user, folder_id, lock=True)
            if folder.name == folder_name:
                return folder
            _ensure_unique_name(user, folder.parent, folder_name)
            old_name = folder.name
            folder.name = folder_name
            folder.save(update_fields=['name', 'updated_at'])
    except IntegrityError as error:
        raise _name_conflict(folder_name) from error

    logger.info(
        'Folder renamed: folder=%d, %s -> %s',
        folder.id,
        old_name,
        folder_name,
    )
    return folder


def move_folder(
    user: _User,
    folder_id: int,
    target_parent_id: int | None,
) -> Folder:
    """Re-parent a folder.

    Walks the ancestors of the target and refuses the move if the folder
    itself is among them. Locks follow the order of a folder delete
    (ledger, then folders), so a move and a delete of the same tree run
    one after the other.

    Args:
        user: Caller.
        folder_id: Folder to move.
        target_parent_id: New parent, None for the root.

    Returns:
        Updated Folder instance.

    Raises:
        NotFoundError: If the target is not one of the caller's folders.
        InvalidInputError: If the move would create a cycle.
        ConflictError: If the target already has a child with this name.
    """
    try:
        with transaction.atomic():
            lock_quota(user)
            folder = get_owned_folder(user, folder_id, lock=True)
            target = _lock_parent(user, target_parent_id)
            if target is not None and is_same_or_descendant(target, folder):
                raise InvalidInputError(
                    'Cannot move folder into itself or its children',
                )
            if folder.parent_id == (target.id if target else None):
                return folder
            _ensure_unique_name(user, target, folder.name)
            folder.parent = target
            folder.save(update_fields=['parent', 'updated_at'])
    except IntegrityError as error:
        raise _name_conflict(folder.name) from error

    logger.info(
        'Folder moved: user=%s, folder=%d, new_parent=%s',
        user.username,
        folder.id,
        target_parent_id,
    )
    return folder


def delete_folder(user: _User, folder_id: int) -> FolderDeletion:
    """Delete a folder with every descendant folder and file.

    One unit of work: the ledger row and the folder are locked, the
    subtree is enumerated, file sizes are summed, records are deleted
    and the ledger is decremented by exactly that sum, all in a single
    transaction. Blobs are removed after commit by the post_delete signal.

    Files never cascade with their folder, so a file that reached the
    subtree after it was summed aborts the delete instead of leaving the
    ledger behind.

    Args:
        user: Caller.
        folder_id: Root of the subtree to delete.

    Returns:
        FolderDeletion with counts and freed bytes.

    Raises:
        ConflictError: If the subtree changed while it was being deleted.
    """
    try:
        with transaction.atomic():
            lock_quota(user)
            folder = get_owned_folder(user, folder_id, lock=True)
            folder_ids = collect_subtree_ids(folder)

            files = File.objects.filter(user=user, folder_id__in=folder_ids)
            totals = files.aggregate(
                count=Count('id'),
                size=Sum('size_bytes'),
            )
            file_count = totals['count'] or 0
            freed_bytes = totals['size'] or 0

            files.delete()
            Folder.objects.filter(user=user, id__in=folder_ids).delete()
            decrement_usage(user, freed_bytes)
    except RestrictedError as error:
        logger.warning(
            'Folder %d gained files during delete, aborted',
            folder_id,
        )
        raise ConflictError(
            'Folder contents changed during delete, try again',
        ) from error

    logger.info(
        'Folder deleted: user=%s, folder=%d, folders=%d, files=%d, freed=%d',
        user.username,
        folder_id,
        len(folder_ids),
        file_count,
        freed_bytes,
    )
    return FolderDeletion(
        folder_count=len(folder_ids),
        file_count=file_count,
        freed_bytes=freed_bytes,
    )


def resolve_breadcrumbs(user: _User, folder_id: int) -> list[Breadcrumb]:
    """Build the trail from the root to a folder.

    Args:
        user: Caller.
        folder_id: Folder at the end of the trail.

    Returns:
        Breadcrumbs, root first (``id=None``, name 'Home').
    """
    folder = get_owned_folder(user, folder_id)
    trail = [Breadcrumb(id=None, name=ROOT_FOLDER_NAME)]
    trail.extend(
        Breadcrumb(id=ancestor.id, name=ancestor.name)
        for ancestor in reversed(get_ancestry(folder))
    )
    return trail


def get_ancestry(folder: Folder) -> list[Folder]:
    """Walk parent links from a folder up to the root.

    Args:
        folder: Starting folder.

    Returns:
        The folder followed by its ancestors, nearest first.

    Raises:
        ConflictError: If the parent links form a cycle.
    """
    chain: list[Folder] = []
    seen: set[int] = set()
    current: Folder | None = folder
    while current is not None:
        if current.id in seen:
            logger.error('Folder hierarchy cycle at folder %d', current.id)
            raise ConflictError('Folder hierarchy contains a cycle')
        seen.add(current.id)
        chain.append(current)
        current = current.parent
    return chain


def get_folder_path(folder: Folder) -> str:
    """Build the display path of a folder, e.g. '/docs/reports'.

    Args:
        folder: Folder to describe.

    Returns:
        Slash-separated path from the root.
    """
    names = [ancestor.name for ancestor in reversed(get_ancestry(folder))]
    return _PATH_SEPARATOR + _PATH_SEPARATOR.join(names)


def is_same_or_descendant(candidate: Folder, ancestor: Folder) -> bool:
    """Check whether ``candidate`` is ``ancestor`` or lies beneath it.

    Args:
        candidate: Folder whose ancestry is walked.
        ancestor: Folder looked for in that ancestry.

    Returns:
        True if ``ancestor`` appears in the ancestry of ``candidate``.
    """
    return any(
        folder.id == ancestor.id for folder in get_ancestry(candidate)
    )


def collect_subtree_ids(folder: Folder) -> list[int]:
    """Enumerate a folder and all of its descendants breadth-first.

    Args:
        folder: Root of the subtree.

    Returns:
        Folder ids, the root first.
    """
    collected = [folder.id]
    seen = {folder.id}
    frontier = [folder.id]
    while frontier:
        children = Folder.objects.filter(
            parent_id__in=frontier,
        ).values_list('id', flat=True)
        frontier = [child for child in children if child not in seen]
        seen.update(frontier)
        collected.extend(frontier)
    return collected


def count_folders(user: _User) -> int:
    """Count every folder in the caller's tree.

    Args:
        user: Caller.

    Returns:
        Number of folders at any depth.
    """
    return Folder.objects.filter(user=user).count()


def _lock_parent(user: _User, parent_id: int | None) -> Folder | None:
    if parent_id is None:
        return None
    try:
        return Folder.objects.select_for_update().get(id=parent_id, user=user)
    except Folder.DoesNotExist as error:
        raise NotFoundError('Parent folder not found') from error


def _ensure_unique_name(
    user: _User,
    parent: Folder | None,
    name: str,
) -> None:
    siblings = Folder.objects.filter(user=user, parent=parent, name=name)
    if siblings.exists():
        raise _name_conflict(name)


def _name_conflict(name: str) -> ConflictError:
    return ConflictError(f"Folder with name '{name}' already exists")
