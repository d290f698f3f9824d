"""
Namespace composer for scoped cache keys.

This module turns a namespace (an ordered sequence of string segments) plus a
caller-supplied logical key into the storage key used by the underlying cache
pool. Storage keys have the format:

    sha256("{segment_1}::{segment_2}::...::{logical_key}").hexdigest()

Key Features:
- Uniform handling of "a::b" path strings and explicit segment sequences
- Order-sensitive composition (["a", "b"] and ["b", "a"] never collide)
- Fixed-width 64 character hex digests, safe for every Django cache backend
"""

import hashlib
from collections.abc import Mapping, Set
from typing import Iterable, Tuple, Union

NamespaceInput = Union[str, Iterable[str], None]


class NamespaceComposer:
    """
    Builds, merges and hashes namespaces.

    A namespace is always held as a tuple of segments. Strings are treated
    as delimited paths and split on DELIMITER; empty segments are kept as-is.

    Example Usage:
        >>> ns = NamespaceComposer()
        >>> ns.normalize("app::users")
        ('app', 'users')
        >>> ns.merge(('app',), ['users', 'profile'])
        ('app', 'users', 'profile')
        >>> ns.storage_key(('app', 'users'), '42')  # 64 hex chars
    """

    DELIMITER = "::"

    def normalize(self, namespace: NamespaceInput) -> Tuple[str, ...]:
        """
        Convert a namespace input into its canonical tuple form.

        Args:
            namespace: A "::" delimited path, a sequence of segments, or None

        Returns:
            Tuple of namespace segments, in order

        Raises:
            ValueError: If namespace is not a string or an ordered sequence of
                strings (sets and mappings are rejected)

        Example:
            >>> ns.normalize("app::users")
            ('app', 'users')
            >>> ns.normalize(["app", "users"])
            ('app', 'users')
            >>> ns.normalize("a::::b")
            ('a', '', 'b')
        """
        if namespace is None:
            return ()

        if isinstance(namespace, str):
            return tuple(namespace.split(self.DELIMITER))

        # Sets and mappings have no stable order across processes
        if (
            isinstance(namespace, (bytes, bytearray, Set, Mapping))
            or not hasattr(namespace, "__iter__")
        ):
            raise ValueError(
                f"namespace must be a string or an ordered sequence of strings, "
                f"got {type(namespace).__name__}"
            )

        segments = tuple(namespace)
        for segment in segments:
            self._validate_segment(segment)

        return segments

    def merge(
        self,
        base: Iterable[str],
        addition: NamespaceInput,
        replace: bool = False,
    ) -> Tuple[str, ...]:
        """
        Compose a namespace from a base and an addition.

        Args:
            base: Current namespace segments
            addition: Segments (or "::" path) to append
            replace: If True, discard base and use the addition alone

        Returns:
            Merged namespace tuple

        Example:
            >>> ns.merge(('app',), 'users')
            ('app', 'users')
            >>> ns.merge(('app',), 'posts', replace=True)
            ('posts',)
        """
        extra = self.normalize(addition)

        if replace:
            return extra

        return tuple(base) + extra

    def storage_key(self, namespace: Iterable[str], logical_key: str) -> str:
        """
        Derive the storage key for a logical key inside a namespace.

        The segments and the key are joined with DELIMITER, UTF-8 encoded and
        hashed with SHA-256. The full hex digest is returned.

        Segments are joined as-is, so a segment that itself contains "::"
        hashes like the segments it spells: ["a::b"] and ["a", "b"] give the
        same key. Keep the delimiter out of segments passed as a sequence.

        Args:
            namespace: Namespace segments, in order
            logical_key: Caller-supplied key

        Returns:
            64 character lowercase hexadecimal digest

        Example:
            >>> key = ns.storage_key(('app', 'users'), '42')
            >>> len(key)
            64
        """
        joined = self.DELIMITER.join([*namespace, logical_key])
        return hashlib.sha256(joined.encode("utf-8")).hexdigest()

    def path(self, namespace: Iterable[str]) -> str:
        """Human readable form of a namespace, used for logs and metric labels."""
        return self.DELIMITER.join(namespace)

    def _validate_segment(self, segment: object) -> None:
        """
        Validate that a namespace segment is a string.

        Segment contents are not inspected; empty strings are allowed.

        Args:
            segment: Segment to validate

        Raises:
            ValueError: If segment is not a string
        """
        if not isinstance(segment, str):
            raise ValueError(
                f"namespace segments must be strings, got {type(segment).__name__}"
            )


# Singleton instance for easy import
namespace_composer = NamespaceComposer()
