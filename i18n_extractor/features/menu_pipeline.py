"""
Menu scan/replace pipeline.

Two separate steps over one menu definition file:

* ``scan`` collects menu names and item labels into a standalone defaults
  file, leaving the source alone
* ``replace`` swaps each label for a translation call using the reviewed
  defaults file; all or nothing, and a no-op on a file already replaced
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..core.errors import AmbiguousLiteralMatch
from ..core.registry import KeyRegistry, RegistryEntry
from ..frameworks.base import BaseAdapter, CallSite, FrameInfo, StringSite, Token, call_matches
from ..utils.config import KeysConfig, MenuConfig, ScanConfig
from ..utils.fileio import read_text, write_if_changed
from ..utils.logging import get_logger
from ..utils.validators import slugify

# Frames that may sit between an item call and its label, e.g. ``if cfg!(..) { "A" } else { "B" }``
_TRANSPARENT_FRAMES = ('block', 'group')


@dataclass(frozen=True)
class MenuSite:
    """A menu name or item label found in the source."""
    kind: str  # menu | item
    text: str
    key: str
    token: Token

    @property
    def line(self) -> int:
        return self.token.line


@dataclass
class MenuScanResult:
    sites: List[MenuSite] = field(default_factory=list)
    already_translated: int = 0


@dataclass
class ReplaceResult:
    """Outcome of a replace run."""
    path: str
    replaced: List[Tuple[str, int]] = field(default_factory=list)  # key, line
    already_translated: int = 0
    import_added: bool = False
    written: bool = False


class MenuScanner:
    """
    Find menu names and item labels in one source file.

    A menu is a ``menu_types`` construct (``Menu { name: .., items: .. }`` or
    ``Menu(name=.., items=..)``); its name is the literal in one of the
    ``name_fields``. Items are the first argument of an ``item_calls`` call.
    Keys follow the nesting of menus::

        <prefix>.<namespace>.<menu>.<submenu>         menu name
        <prefix>.<namespace>.<menu>.<submenu>.<item>  item label

    A menu whose name is already a translation call contributes the path of
    that key instead.
    """

    def __init__(
        self,
        adapter: BaseAdapter,
        menu_config: Optional[MenuConfig] = None,
        keys_config: Optional[KeysConfig] = None,
        scan_config: Optional[ScanConfig] = None,
    ):
        self.adapter = adapter
        self.menu_config = menu_config or MenuConfig()
        self.keys_config = keys_config or KeysConfig()
        self.scan_config = scan_config or ScanConfig.for_framework(adapter.name)
        self.logger = get_logger()

    @property
    def base_key(self) -> str:
        return f"{self.keys_config.prefix}.{self.menu_config.namespace}"

    def find_sites(self, content: str) -> MenuScanResult:
        """
        Locate menu literals in ``content``.

        Raises:
            LexError: If the content cannot be tokenized
        """
        tokens = self.adapter.tokenize(content)
        events = self.adapter.walk(tokens, self.scan_config.translation_calls,
                                   self.scan_config.ignore_marker)

        names: Dict[int, Tuple[str, Union[StringSite, CallSite]]] = {}
        for event in events:
            frame = self._menu_frame(event)
            if frame is None or frame.id in names:
                continue
            if isinstance(event, CallSite) and event.key:
                names[frame.id] = ('call', event)
            elif isinstance(event, StringSite) and self._usable(event):
                names[frame.id] = ('literal', event)

        paths = self._menu_paths(events, names)
        result = MenuScanResult()

        for event in events:
            if isinstance(event, CallSite):
                if self._menu_frame(event) is not None or self._item_frame(event.context.frames) is not None:
                    result.already_translated += 1
                continue
            if not self._usable(event):
                continue

            menu = self._menu_frame(event)
            if menu is not None:
                if names.get(menu.id, (None, None))[1] is event:
                    key = '.'.join([self.base_key] + paths[menu.id])
                    result.sites.append(MenuSite('menu', event.token.value, key, event.token))
                continue

            item = self._item_frame(event.context.frames)
            if item is None:
                continue
            path = self._enclosing_path(event.context.frames, paths)
            slug = slugify(event.token.value, self.keys_config.max_words)
            key = '.'.join([self.base_key] + path + [slug])
            result.sites.append(MenuSite('item', event.token.value, key, event.token))

        return result

    def scan(self, source: Union[str, Path]) -> KeyRegistry:
        """
        Build the menu defaults for ``source``.

        Keys that collide with a different text get ``_2``, ``_3`` ...
        suffixes. A label repeated anywhere in the file shares the entry of
        its first occurrence, so every text in the defaults maps to one key.
        """
        source = Path(source)
        found = self.find_sites(read_text(source))
        entries: Dict[str, RegistryEntry] = {}
        seen_texts = set()

        for site in found.sites:
            if site.text in seen_texts:
                continue
            seen_texts.add(site.text)
            key = site.key
            n = 1
            while key in entries:
                n += 1
                key = f"{site.key}_{n}"
            entries[key] = RegistryEntry(key, site.text, f"{source.name}:{site.line}")

        self.logger.info(f"{source}: {len(entries)} menu strings, "
                         f"{found.already_translated} already translated")
        return KeyRegistry(entries.values())

    def write_defaults(self, source: Union[str, Path], defaults_path: Union[str, Path]) -> KeyRegistry:
        """Scan ``source`` and save the result to ``defaults_path``."""
        registry = self.scan(source)
        registry.save(defaults_path)
        return registry

    # ------------------------------------------------------------------

    def _usable(self, event: StringSite) -> bool:
        text = event.token.value
        context = event.context
        if context.role != 'value' or context.marked or context.in_translation_call:
            return False
        return bool(text.strip()) and '://' not in text

    def _menu_frame(self, event: Union[StringSite, CallSite]) -> Optional[FrameInfo]:
        """The menu construct whose name field directly holds ``event``."""
        frame = event.context.innermost
        if frame is None or frame.kind not in ('struct', 'call'):
            return None
        if not call_matches(frame.callee, self.menu_config.menu_types):
            return None
        if event.context.field not in self.menu_config.name_fields:
            return None
        return frame

    def _item_frame(self, frames: Tuple[FrameInfo, ...]) -> Optional[FrameInfo]:
        for frame in reversed(frames):
            if frame.kind in _TRANSPARENT_FRAMES:
                continue
            if frame.kind == 'call' and frame.arg_index == 0 \
                    and call_matches(frame.callee, self.menu_config.item_calls):
                return frame
            return None
        return None

    def _menu_paths(self, events, names) -> Dict[int, List[str]]:
        """Key path of every named menu, outermost menus first."""
        frames: Dict[int, Tuple[FrameInfo, ...]] = {}
        for event in events:
            for depth, frame in enumerate(event.context.frames):
                if frame.id in names and frame.id not in frames:
                    frames[frame.id] = event.context.frames[:depth]

        paths: Dict[int, List[str]] = {}
        for menu_id in sorted(frames, key=lambda i: len(frames[i])):
            how, event = names[menu_id]
            if how == 'call':
                paths[menu_id] = self._path_from_key(event.key)
            else:
                parent = self._enclosing_path(frames[menu_id], paths)
                paths[menu_id] = parent + [slugify(event.token.value, self.keys_config.max_words)]
        return paths

    def _path_from_key(self, key: str) -> List[str]:
        prefix = self.base_key + '.'
        if key.startswith(prefix):
            return key[len(prefix):].split('.')
        return [key.rsplit('.', 1)[-1]]

    @staticmethod
    def _enclosing_path(frames: Tuple[FrameInfo, ...], paths: Dict[int, List[str]]) -> List[str]:
        for frame in reversed(frames):
            if frame.id in paths:
                return list(paths[frame.id])
        return []


class MenuReplacer:
    """
    Rewrite menu literals as translation calls.

    Every literal found by ``MenuScanner`` must map to exactly one entry of
    the defaults file, the entry with the same text. A literal with no entry
    or with several aborts the run before anything is written.
    """

    def __init__(self, scanner: MenuScanner):
        self.scanner = scanner
        self.menu_config = scanner.menu_config
        self.logger = get_logger()

    def replace(self, source: Union[str, Path], defaults_path: Union[str, Path],
                dry_run: bool = False) -> ReplaceResult:
        """
        Replace menu literals in ``source``.

        Raises:
            RegistryLoadError: If the defaults file cannot be loaded
            AmbiguousLiteralMatch: If a literal matches no entry or several
                entries; the source is left untouched
        """
        source = Path(source)
        defaults = KeyRegistry.load(defaults_path)
        content = read_text(source)
        found = self.scanner.find_sites(content)
        result = ReplaceResult(path=str(source), already_translated=found.already_translated)

        matches = []
        failures = []
        for site in found.sites:
            try:
                matches.append((site, self.match(site, defaults, f"{source}:{site.line}")))
            except AmbiguousLiteralMatch as e:
                failures.append(e)
        if failures:
            for failure in failures[1:]:
                self.logger.error(str(failure))
            raise failures[0]

        new_content = content
        for site, key in sorted(matches, key=lambda m: m[0].token.start, reverse=True):
            call = self.menu_config.replacement.replace('{key}', key)
            new_content = new_content[:site.token.start] + call + new_content[site.token.end:]
        result.replaced = [(key, site.line) for site, key in matches]

        if result.replaced and self.menu_config.import_line:
            new_content, result.import_added = self.ensure_import(new_content, self.menu_config.import_line)

        if not dry_run:
            result.written = write_if_changed(source, new_content)
        return result

    @staticmethod
    def match(site: MenuSite, defaults: KeyRegistry, location: str) -> str:
        candidates = defaults.keys_for_text(site.text)
        if len(candidates) == 1:
            return candidates[0]
        raise AmbiguousLiteralMatch(site.text, candidates, location)

    @staticmethod
    def ensure_import(content: str, import_line: str) -> Tuple[str, bool]:
        """Insert ``import_line`` before the first import unless present."""
        lines = content.splitlines(keepends=True)
        if any(line.strip() == import_line.strip() for line in lines):
            return content, False

        newline = '\r\n' if '\r\n' in content else '\n'
        for index, line in enumerate(lines):
            if line.startswith(('use ', 'import ', 'from ')):
                lines.insert(index, import_line + newline)
                return ''.join(lines), True
        return import_line + newline + content, True
