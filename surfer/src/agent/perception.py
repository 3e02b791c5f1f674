"""
DOM snapshot protocol.

The snapshot script reads the page without changing styles or layout. It walks
the visible tree from <body> (max depth 15), skips script/style/noscript/svg/link
subtrees, gives interactive elements (a, button, input, textarea, select) ids
[e0], [e1], ... in traversal order via a ``data-eid`` attribute, and emits one
compact line per element or leaf text. Ids restart at zero on every call.
"""
from __future__ import annotations

import logging
import re
from typing import Any, List, Optional

from playwright.sync_api import Error as PlaywrightError

from surfer.src.utils.config import DOM_SNAPSHOT_MAX_CHARS
from surfer.src.utils.logging import get_logger, log_event

from .models import Extraction, PageState

LOGGER = get_logger("perception")

EID_ATTRIBUTE = "data-eid"
_BARE_EID = re.compile(r"\[?e\d+\]?")

SNAPSHOT_JS = r"""
() => {
  const SKIP = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'SVG', 'LINK']);
  const INTERACTIVE = ['a', 'button', 'input', 'textarea', 'select'];
  let id = 0;
  const lines = [];
  const seen = new Set();

  function isVisible(el) {
    if (el.offsetParent === null && el.tagName !== 'BODY' && el.tagName !== 'HTML') return false;
    const s = getComputedStyle(el);
    return s.display !== 'none' && s.visibility !== 'hidden' && s.opacity !== '0';
  }

  function emit(line) {
    if (line && !seen.has(line)) {
      seen.add(line);
      lines.push(line);
    }
  }

  function walk(node, depth) {
    if (depth > 15) return;
    for (const child of node.children) {
      if (SKIP.has(child.tagName.toUpperCase())) continue;
      if (!isVisible(child)) continue;
      const tag = child.tagName.toLowerCase();

      if (INTERACTIVE.includes(tag)) {
        const eid = '[e' + (id++) + ']';
        child.setAttribute('data-eid', eid);
        let desc = '';
        if (tag === 'a') {
          desc = eid + ' link "' + (child.textContent || '').trim().slice(0, 60) + '"';
        } else if (tag === 'input' || tag === 'textarea') {
          desc = eid + ' ' + tag + ' type=' + (child.type || 'text') + ' placeholder="' + (child.placeholder || '') + '"';
          if (child.name) desc += ' name=' + child.name;
          if (child.value) desc += ' value="' + child.value.slice(0, 30) + '"';
        } else if (tag === 'button') {
          desc = eid + ' button "' + (child.textContent || '').trim().slice(0, 60) + '"';
        } else if (tag === 'select') {
          const opts = [...child.options].map(o => o.text.trim().slice(0, 20)).join('|');
          desc = eid + ' select [' + opts + ']';
        }
        emit(desc);
      } else {
        const text = child.textContent ? child.textContent.trim() : '';
        if (text && text.length > 2 && text.length < 200 && child.children.length === 0) {
          emit('  "' + text.slice(0, 100) + '"');
        }
      }
      walk(child, depth + 1);
    }
  }

  if (document.body) walk(document.body, 0);
  return lines.join('\n');
}
"""


def selector_for(eid: str) -> str:
    """``e3`` or ``[e3]`` -> ``[data-eid="[e3]"]``."""
    label = eid.strip()
    if not label.startswith("["):
        label = f"[{label}]"
    return f'[{EID_ATTRIBUTE}="{label}"]'


def resolve_selector(selector: str) -> str:
    """Bare element ids (``e3``, ``[e3]``) become attribute selectors; CSS passes through."""
    if _BARE_EID.fullmatch(selector.strip()):
        return selector_for(selector)
    return selector


def truncate_snapshot(raw: str, max_chars: int = DOM_SNAPSHOT_MAX_CHARS) -> str:
    # max_chars bounds the page content; the marker line is appended after it
    if len(raw) <= max_chars:
        return raw
    return f"{raw[:max_chars]}\n... [truncated, {len(raw)} total chars]"


def capture_dom_snapshot(page: Any, max_chars: int = DOM_SNAPSHOT_MAX_CHARS) -> str:
    raw = page.evaluate(SNAPSHOT_JS)
    return truncate_snapshot(raw if isinstance(raw, str) else "", max_chars)


def current_url(page: Any) -> str:
    try:
        return str(page.evaluate("() => window.location.href") or "unknown")
    except PlaywrightError:
        return "unknown"


def page_title(page: Any) -> str:
    try:
        return str(page.evaluate("() => document.title") or "untitled")
    except PlaywrightError:
        return "untitled"


def capture_page_state(
    page: Any,
    extracted: Optional[List[Extraction]] = None,
    error: Optional[str] = None,
    max_chars: int = DOM_SNAPSHOT_MAX_CHARS,
) -> PageState:
    try:
        snapshot = capture_dom_snapshot(page, max_chars)
    except PlaywrightError as exc:
        log_event(LOGGER, "snapshot_failed", error=str(exc), level=logging.WARNING)
        snapshot = ""
    return PageState(
        url=current_url(page),
        title=page_title(page),
        dom_snapshot=snapshot,
        extracted=list(extracted or []),
        error=error,
    )
