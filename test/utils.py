"""
Tests for the internal helpers.

This module verifies semantic guarantees of the utilities shared by every record:
- Unset is a falsy singleton, distinct from None, usable in isinstance unions.
- coalesce() only replaces Unset.
- @rename() names generated callables.
- mirror() exposes read-only copies of container fields.
"""
import copy
import unittest
from threading import Thread, Lock
from unittest import TestCase

from tiller.utils import *
from tiller.utils import UnsetType, IntrospectableType


class Record(metaclass=IntrospectableType):
    __introspectable__ = ("names", "table")

    def __init__(self, names, table):
        self._names = names
        self._table = table


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(UnsetType(), Unset)

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))

    def testNotEqualToNoneOrFalse(self) -> None:
        """
        Falsy does not imply equality with other falsy values (None/False).
        """
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self) -> None:
        """
        Unset participates in PEP 604 unions on either side.
        """
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))
        self.assertFalse(isinstance(5, str | Unset))

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance.
        """
        results = []
        lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, Unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce(), rename() and mirror().
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        # Falsy values are preserved.
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testRenameDecorator(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testRenameValidation(self) -> None:
        with self.assertRaises(TypeError):
            rename(5)
        with self.assertRaises(TypeError):
            rename("name")(5)

    def testMirrorIsReadOnly(self) -> None:
        record = Record(["a", "b"], {"k": ["v"]})
        with self.assertRaises(AttributeError):
            record.names = ()

    def testMirrorCopiesContainers(self) -> None:
        """
        Containers come out as tuples and mapping proxies; the backing field is untouched.
        """
        record = Record(["a", "b"], {"k": ["v"]})
        self.assertEqual(record.names, ("a", "b"))
        self.assertEqual(record.table["k"], ("v",))
        with self.assertRaises(TypeError):
            record.table["k"] = ()
        self.assertIsInstance(record._names, list)

    def testIntrospectableRepr(self) -> None:
        self.assertEqual(Record.__typename__, "record")
        self.assertEqual(repr(Record(["a"], {})), "record(names=('a',), table=mappingproxy({}))")

    def testCopyKeepsSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)


if __name__ == '__main__':
    unittest.main()
