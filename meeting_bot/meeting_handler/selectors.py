"""
Platform-specific DOM selectors for meeting automation.

Each table maps a UI affordance to an ordered list of selectors. Order is
priority: the first visible match wins, so new UI variants are handled by
extending a list rather than adding branches to the controllers.

Note: meeting UIs are updated frequently by their vendors, so selectors may
need periodic maintenance.
"""

from typing import Dict, List


# =============================================================================
# GOOGLE MEET
# =============================================================================

GOOGLE_MEET_SELECTORS: Dict[str, List[str]] = {
    # Device prompt shown before the pre-join screen
    "continue_without_media": [
        'button:has-text("Continue without microphone and camera")',
        'button:has-text("Continue without microphone")',
    ],

    # Guest name input
    "name_input": [
        'input[placeholder="Your name"]',
        'input[placeholder="Enter your name"]',
        'input[aria-label="Your name"]',
        'input[aria-label="Enter your name"]',
    ],

    "join_button": [
        'button:has-text("Ask to join")',
        'button:has-text("Join now")',
        'button:has-text("Switch here")',
    ],

    # Waiting room after "Ask to join"
    "waiting_room": [
        'text="Waiting to be let in"',
        'text="Waiting for the host to let you in"',
        'text="You\'re waiting to join"',
        'text="Asking to be admitted"',
        '[aria-label*="waiting"]',
        '[aria-label*="Waiting"]',
        '[data-message*="waiting" i]',
    ],

    "leave_button": [
        'button[aria-label*="Leave call"]',
        'button[aria-label*="leave call"]',
        'button[aria-label*="Leave"]',
        'button:has-text("Leave")',
    ],

    # Secondary signals that we are inside the call
    "meeting_indicators": [
        '[data-self-name]',
        'button[aria-label*="Turn off microphone"]',
        'button[aria-label*="Turn on microphone"]',
        'button[aria-label*="Turn off camera"]',
        'button[aria-label*="Turn on camera"]',
    ],

    "mic_toggle": [
        'button[aria-label*="Turn off microphone"]',
        'button[aria-label*="Turn on microphone"]',
        'button[aria-label*="microphone" i]',
    ],

    "camera_toggle": [
        'button[aria-label*="Turn off camera"]',
        'button[aria-label*="Turn on camera"]',
        'button[aria-label*="camera" i]',
    ],

    "people_button": [
        'button[aria-label^="People -"][aria-label*="joined"]',
        'button[aria-label^="People"]',
    ],

    # Organizer admission
    "admit_button": [
        'button:has-text("Admit")',
        'button[aria-label*="Admit"]',
        'button:has-text("Admit all")',
    ],

    "admit_confirm": [
        'button[data-mdc-dialog-action="ok"]',
        'button.mUIrbf-LgbsSe[data-mdc-dialog-action="ok"]',
        'button:has([jsname="V67aGc"]:has-text("Admit all"))',
        'button:has-text("Admit all")[data-mdc-dialog-action="ok"]',
    ],

    "admit_dialog": [
        '[data-mdc-dialog-action="ok"]',
    ],
}


# =============================================================================
# ZOOM (web client)
# =============================================================================

ZOOM_SELECTORS: Dict[str, List[str]] = {
    "cookie_accept": [
        'button:has-text("Accept Cookies")',
        '#onetrust-accept-btn-handler',
    ],

    "terms_agree": [
        '#wc_agree1',
        'button#wc_agree1',
        'button:has-text("I Agree")',
        'button.btn-primary:has-text("I Agree")',
        '#wc_agree2',
        'button#wc_agree2',
    ],

    "media_prompt_use_mic_cam": [
        'button:has-text("Use microphone and camera")',
        'button:has-text("Join with computer audio")',
        'button:has-text("Turn on microphone and camera")',
    ],

    "media_prompt_continue_without": [
        'button:has-text("Continue without microphone and camera")',
        'button:has-text("Continue without audio")',
        'button:has-text("Join without audio")',
    ],

    "name_input": [
        'input#input-for-name',
        'input.preview-meeting-info-field-input',
        'input[placeholder="Your Name"]',
        'input[aria-label="Your Name"]',
        'input[name="username"]',
    ],

    "passcode_input": [
        'input[placeholder*="passcode" i]',
        'input[name="password"]',
        'input[id*="passcode"]',
    ],

    "waiting_message": [
        'text=/Waiting for the host to start this meeting/i',
        'text=/Please wait for the host to start/i',
        'text=/The host will let you in soon/i',
    ],

    "join_button": [
        'button[type="submit"]:has-text("Join")',
        '[data-testid="join-button"]',
        'button.preview-join-button',
        'button:has-text("Join Meeting")',
        'button:has-text("Join")',
    ],

    "meeting_indicators": [
        '.meeting-client',
        '.wm-meeting-client',
        '.meeting-client-inner',
        '[data-testid*="meeting"]',
    ],

    "mic_toggle": [
        'button[aria-label*="Unmute"]',
        'button[aria-label*="Mute"]',
        '[data-testid*="audio"]',
    ],

    "camera_toggle": [
        'button[aria-label*="Start Video"]',
        'button[aria-label*="Stop Video"]',
        '[data-testid*="video"]',
    ],

    "leave_button": [
        'button:has-text("Leave")',
        'button[aria-label*="Leave"]',
        '[data-testid*="leave"]',
    ],

    # Toolbar, participant and video areas
    "meeting_chrome": [
        '.meeting-control-bar',
        '.meeting-controls',
        '[data-testid*="meeting-control"]',
        '.participant-list',
        '.participant-container',
        '.video-container',
        '.video-grid',
        '.meeting-video-grid',
    ],
}


# =============================================================================
# MICROSOFT TEAMS (web)
# =============================================================================

TEAMS_SELECTORS: Dict[str, List[str]] = {
    # "Continue on this browser" (when Teams tries to open the desktop app)
    "continue_browser": [
        'button[data-tid="joinOnWeb"]',
        'button:has-text("Continue on this browser")',
        'a:has-text("Continue on this browser")',
        'text="Use web app instead"',
    ],

    # Device permission dialog
    "permission_dialog": [
        'button:has-text("Continue without audio or video")',
        'button:has-text("Continue without")',
    ],

    "name_input": [
        'input[placeholder*="name" i]',
        'input[placeholder="Type your name"]',
        'input[data-tid="prejoin-display-name-input"]',
        '#prejoin-input-name',
    ],

    "join_button": [
        'button:has-text("Join now")',
        'button[data-tid="prejoin-join-button"]',
        'button[data-tid="join-button"]',
        'button:has-text("Join meeting")',
        'button.join-btn',
    ],

    "prejoin_ready": [
        'button:has-text("Join now")',
        'input[placeholder*="name" i]',
    ],

    "prejoin_camera_toggle": [
        '[role="switch"][title*="camera" i]',
        'button[data-tid="toggle-video"]',
        'button[aria-label*="camera" i]',
    ],

    "waiting_lobby": [
        'text=/Someone in the meeting should let you in soon/i',
        'text=/We\'ll let people in when the meeting starts/i',
        'text=/When the meeting starts, we\'ll let people in/i',
        'text="Waiting to be let in"',
        '[data-tid="lobby-waiting-text"]',
    ],

    "entry_denied": [
        'text="You can\'t join this meeting"',
        'text="Meeting has ended"',
        'text="You were removed from the meeting"',
        '[data-tid="meeting-ended"]',
    ],

    "camera_toggle": [
        'button[data-tid="toggle-camera"]',
        'button[id="video-button"]',
        'button[title*="camera"]',
        'button[aria-label*="camera"]',
    ],

    "mic_toggle": [
        'button[data-tid="toggle-mute"]',
        'button[id="microphone-button"]',
        'button[title*="microphone"]',
        'button[aria-label*="microphone"]',
        'button[aria-label*="Mic"]',
    ],

    "leave_button": [
        'button[data-tid="leave-call-button"]',
        'button[id="hangup-button"]',
        'button[aria-label*="Leave"]',
        'button:has-text("Leave")',
    ],

    # In-meeting controls
    "meeting_controls": [
        'button[id="mic-button"]',
        'button[id="hangup-button"]',
        'button[aria-label*="Leave"]',
    ],

    # Stage layout / participant tiles
    "meeting_stage": [
        'div[data-tid="stage-layout"]',
        'div[data-tid="modern-stage-wrapper"]',
        'div[data-testid="stage-segment"]',
    ],

    "meeting_toolbar": [
        'button[aria-label*="Chat"]',
        'button[aria-label*="People"]',
    ],

    "meeting_chrome": [
        'div[data-tid="meeting-controls"]',
        'div[data-tid="participant-tile"]',
    ],
}


def get_selectors_for(table: Dict[str, List[str]], element_type: str) -> List[str]:
    """
    Get list of selectors for a specific element type.

    Args:
        table: One of the platform selector tables
        element_type: Key in that table

    Returns:
        List of CSS/text selectors to try (a copy; tables stay untouched)
    """
    return list(table.get(element_type, []))
