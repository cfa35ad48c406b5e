"""Result and argument records exchanged with the vault backend."""

from typing import List, Optional, TypedDict, Union


class Item(TypedDict):
    id: int
    name: str


class Password(TypedDict):
    name: str
    password: str


class Count(TypedDict):
    insert: int
    ignore: int


class PasswordOption(TypedDict):
    len: int
    uppercase: bool
    lowercase: bool
    digit: bool
    special: bool


class DecryptPassword(TypedDict):
    password: Optional[str]


# Exported/imported data: a list of [name, password] pairs
PasswordRows = List[List[str]]

# import_password accepts a file path (native bridge) or inline rows
ImportSource = Union[str, PasswordRows]
