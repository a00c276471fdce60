import os
from typing import (
    Any,
    Callable,
    Generic,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
    get_origin,
    get_type_hints,
)

from tqdm import tqdm


def find_files(path: str, endings: Optional[List[str]] = None, recursive: bool = False) -> List[str]:
    """
    Lists the files in a directory (and its subdirectories, if recursive) whose names end in one of `endings`.
    """
    if recursive:
        found = [os.path.join(dp, f) for dp, _, fn in os.walk(path, topdown=True) for f in fn]
    else:
        found = [os.path.join(path, f) for f in os.listdir(path) if os.path.isfile(os.path.join(path, f))]
    if endings is not None:
        found = [f for f in found if any(f.lower().endswith(e) for e in endings)]
    return sorted(found)


def cli_file_pairs(
    ipaths: Optional[str] = None,
    opaths: Optional[str] = None,
    *,
    in_endings: Optional[List[str]] = None,
    out_ending: Optional[str] = None,
    recursive: bool = False,
) -> List[Tuple[str, str]]:
    """
    Given the path arguments of a CLI command, works out which input files to process and where each result goes.

    - A file input is used as-is. A directory input contributes every file ending in one of `in_endings`
      (recursively if requested). No input means the current working directory.
    - For a single file with an explicit output file, that pair is returned unchanged.
    - Otherwise output paths are inferred: the matched input ending is swapped for `out_ending`
      (or `out_ending` is appended), relative to the output directory, which defaults to the input directory.

    Multi-part endings such as `.term.txt` are matched as plain suffixes, so `a/b.term.txt` becomes `out/a/b.html`.
    """
    if ipaths is None:
        ipaths = "."

    if not os.path.exists(ipaths):
        raise FileNotFoundError(ipaths)
    if out_ending is None:
        raise ValueError("Can't infer output file names without a target file ending specified")

    def infer(ipath: str, force_accept: bool) -> Optional[str]:
        lower = ipath.lower()
        endings = [ie for ie in (in_endings or []) if lower.endswith(ie)]
        if in_endings is not None and not endings and not force_accept:
            return None
        if lower.endswith(out_ending) and not force_accept:
            return None
        stem = ipath[: -len(endings[0])] if endings else ipath
        return stem + out_ending

    if os.path.isfile(ipaths):
        input_dir, ip = os.path.split(ipaths)
        rel_pairs = [(ip, infer(ip, True))]
    else:
        input_dir = ipaths
        relative = [os.path.relpath(f, input_dir) for f in find_files(ipaths, recursive=recursive)]
        rel_pairs = [(ip, infer(ip, False)) for ip in relative]
    rel_pairs = [(ip, op) for (ip, op) in rel_pairs if op is not None]

    if opaths is None:
        opaths = input_dir

    if os.path.isfile(ipaths) and not os.path.isdir(opaths) and os.path.split(opaths)[1] != "":
        return [(ipaths, opaths)]

    if os.path.isfile(opaths):
        raise OSError(f"Output path exists but is not a directory: '{opaths}'")

    return [(os.path.join(input_dir, ip), os.path.join(opaths, op)) for (ip, op) in rel_pairs]


def foreach_file_pair(pairs, fn, quiet=False):
    """Runs `fn(ipath, opath)` for every pair, with a progress bar for bigger batches."""
    if not quiet and len(pairs) > 5:
        progress = tqdm(pairs)
        for ipath, opath in progress:
            progress.set_description(ipath)
            fn(ipath, opath)
        return
    for ipath, opath in pairs:
        fn(ipath, opath)


T = TypeVar("T")


class TU(Generic[T]):
    """A variant of a tagged union declared with `@tagged_union`."""

    union: type
    name: str

    def __init__(self, union: type, name: str):
        self.union = union
        self.name = name

    def __call__(self, val=None) -> "TUI[T]":
        return TUI(self, val)

    def __contains__(self, other):
        return other.variant == self if isinstance(other, TUI) else False

    def __hash__(self):
        return hash((self.union, self.name))

    def __repr__(self):
        return f"{self.union.__name__}.{self.name}"


class TUI(Generic[T]):
    """An instance of a tagged union variant, holding its value."""

    variant: TU[T]
    value: T

    def __init__(self, variant: TU[T], value: T):
        self.variant = variant
        self.value = value

    def __call__(self) -> T:
        return self.value

    def __eq__(self, other):
        return isinstance(other, TUI) and self.variant == other.variant and self.value == other.value

    def __hash__(self):
        return hash((self.variant, self.value))

    def __repr__(self):
        return f"{repr(self.variant)}({repr(self.value)})"


def tagged_union(cls: type):
    hints = get_type_hints(cls)
    members = [(k, v) for (k, v) in hints.items() if get_origin(v) == TU]

    for name, t in members:
        setattr(cls, name, t(cls, name))

    return cls


R = TypeVar("R")


def match(union: TUI, fns: Mapping[Union[TU, type(...)], Callable[[Any], R]]) -> R:
    """
    Calls the function registered for the variant of `union` with its value.
    An `...` key acts as the fallback and is called without arguments.
    """
    ellipsis_fn = None
    for k, v in fns.items():
        if k is Ellipsis:
            ellipsis_fn = v
            continue
        if union in k:
            return v(union())
    if ellipsis_fn is not None:
        return ellipsis_fn()
    return None


RESOURCES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
