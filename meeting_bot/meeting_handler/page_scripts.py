"""
JavaScript snippets evaluated inside meeting pages and frames.

Used where the selector sets are not enough: React-controlled inputs that
ignore plain value assignment, and join buttons whose markup varies between
web client builds.
"""

# Returns true when the frame has at least one visible text input.
HAS_VISIBLE_TEXT_INPUT_JS = """
() => {
    const inputs = document.querySelectorAll('input[type="text"]');
    return Array.from(inputs).some(inp => inp.offsetParent !== null);
}
"""

# Fills the first visible text/email input and dispatches the events React
# listens for, so the join button registers the change.
FILL_NAME_INPUT_JS = """
(botName) => {
    const inputs = document.querySelectorAll('input[type="text"], input[type="email"]');
    for (const input of inputs) {
        if (input.offsetParent === null) continue;
        input.focus();
        const setter = Object.getOwnPropertyDescriptor(
            window.HTMLInputElement.prototype, 'value'
        ).set;
        setter.call(input, '');
        input.dispatchEvent(new Event('input', { bubbles: true }));
        setter.call(input, botName);
        input.dispatchEvent(new Event('input', { bubbles: true }));
        input.dispatchEvent(new Event('change', { bubbles: true }));
        input.dispatchEvent(new Event('blur', { bubbles: true }));
        return { success: true, value: input.value };
    }
    return { success: false };
}
"""

# Clicks the first visible, enabled control whose text mentions "join"
# (but not audio/phone join options).
CLICK_JOIN_BUTTON_JS = """
() => {
    const clickables = document.querySelectorAll('button, [role="button"], div[tabindex], a[tabindex]');
    for (const el of clickables) {
        if (!el.offsetParent) continue;
        const text = (el.textContent || '').trim().toLowerCase();
        if (!text.includes('join') || text.includes('audio') || text.includes('phone')) continue;
        if (el.disabled || el.getAttribute('aria-disabled') === 'true') continue;
        el.scrollIntoView({ block: 'center' });
        el.click();
        return { success: true, text: el.textContent.trim() };
    }
    return { success: false, totalClickables: clickables.length };
}
"""

# Summarizes visible inputs and buttons for debug logging.
DESCRIBE_CONTROLS_JS = """
() => {
    const visible = el => el.offsetParent !== null;
    return {
        inputs: Array.from(document.querySelectorAll('input')).filter(visible).map(inp => ({
            id: inp.id,
            type: inp.type,
            placeholder: inp.placeholder || '',
            ariaLabel: inp.getAttribute('aria-label') || '',
        })),
        buttons: Array.from(document.querySelectorAll('button, [role="button"]')).filter(visible).map(btn => ({
            text: (btn.textContent || '').trim().substring(0, 30),
            ariaLabel: btn.getAttribute('aria-label') || '',
            dataTid: btn.getAttribute('data-tid') || '',
        })),
    };
}
"""
