"""Describes the cookbook domain. Centres around the `Catalog`.

Why is this hard?

- It isn't, much. One user, one file, one process.
- The list must stay sorted by name after every change, ignoring case.
- The file has no ids, so every load numbers the records again.
- Ids must never repeat while the process lives, even after deletes.

The store is a dumb text file. Appends are cheap, everything else rewrites
the lot. Fine for a cookbook.
"""
