"""JavaScript snippets evaluated in the page by the live document backend."""

ELEMENT_INFO_JS = """
el => {
    if (!el.__artifactSyncKey) {
        window.__artifactSyncNextKey = (window.__artifactSyncNextKey || 0) + 1;
        el.__artifactSyncKey = window.__artifactSyncNextKey;
    }
    const attributes = {};
    for (const attr of el.attributes) {
        attributes[attr.name] = attr.value;
    }
    return {
        key: el.__artifactSyncKey,
        tag: el.tagName.toLowerCase(),
        className: typeof el.className === 'string' ? el.className : (el.getAttribute('class') || ''),
        attributes,
    };
}
"""

INNER_TEXT_JS = "el => el.innerText || ''"

VALUE_JS = "el => ('value' in el && typeof el.value === 'string') ? el.value : null"

COMPUTED_STYLE_JS = """
el => {
    const s = window.getComputedStyle(el);
    return {
        'overflow': s.overflow,
        'overflow-x': s.overflowX,
        'overflow-y': s.overflowY,
        'text-overflow': s.textOverflow,
        '-webkit-line-clamp': s.webkitLineClamp || '',
        'max-height': s.maxHeight,
        'display': s.display,
        'visibility': s.visibility,
    };
}
"""

SCROLL_SIZE_JS = "el => [el.scrollHeight, el.clientHeight]"

CLICK_JS = "el => el.click()"

APPLY_STYLES_JS = """
(el, styles) => {
    const previous = {};
    for (const [prop, value] of Object.entries(styles)) {
        previous[prop] = el.style.getPropertyValue(prop);
        el.style.setProperty(prop, value, 'important');
    }
    return previous;
}
"""

RESTORE_STYLES_JS = """
(el, previous) => {
    for (const [prop, value] of Object.entries(previous)) {
        if (value) {
            el.style.setProperty(prop, value);
        } else {
            el.style.removeProperty(prop);
        }
    }
}
"""

SCROLL_TO_END_JS = """
el => {
    el.scrollTop = el.scrollHeight;
    el.scrollLeft = el.scrollWidth;
}
"""

PARENT_JS = "el => el.parentElement"

PREVIOUS_SIBLING_JS = "el => el.previousElementSibling"

PRECEDING_TEXT_JS = """
(container, el) => {
    const walker = document.createTreeWalker(container, NodeFilter.SHOW_TEXT);
    const texts = [];
    let node;
    while ((node = walker.nextNode())) {
        if (el.contains(node)) break;
        if (el.compareDocumentPosition(node) & Node.DOCUMENT_POSITION_FOLLOWING) break;
        const parent = node.parentElement;
        if (parent && parent.closest('pre, code, script, style')) continue;
        const text = node.textContent.trim();
        if (text) texts.push(text);
    }
    return texts;
}
"""

COUNT_JS = "els => els.length"

MUTATION_BINDING = "__artifactSyncMutation"

OBSERVE_MUTATIONS_JS = """
() => {
    if (window.__artifactSyncObserver || !document.body) return;
    window.__artifactSyncObserver = new MutationObserver(() => window.__artifactSyncMutation());
    window.__artifactSyncObserver.observe(document.body, {childList: true, subtree: true});
}
"""

DISCONNECT_MUTATIONS_JS = """
() => {
    if (window.__artifactSyncObserver) {
        window.__artifactSyncObserver.disconnect();
        window.__artifactSyncObserver = null;
    }
}
"""
