"""
UI layer
Purpose: Streamlit-only glue. Renders the auth form, the sidebar of saved
explanations and the conversation view, and delegates all work to AppContext
(auth, session store, conversation controller). Keeps UI concerns separate
from business logic so logic can be unit tested without Streamlit.
"""

from datetime import datetime

import streamlit as st

from eli5.config import get_settings
from eli5.config.logging import configure_logging
from eli5.context import AppContext, build_context
from eli5.errors import AlreadyExists, Eli5Error, is_failure_reply
from eli5.models import ChatSession, Message, ReadingLevel
from eli5.persistence.identity import new_browser_token
from eli5.prompts import DefaultPromptFactory


# ---------------------------
# Page config
# ---------------------------
st.set_page_config(
    page_title="ELI5 Bot",
    page_icon="🧠",
    layout="wide",
    initial_sidebar_state="expanded",
)
configure_logging()

# ---------------------------
# UI constants
# ---------------------------
READING_LEVELS = [lvl.value for lvl in ReadingLevel]
PROMPTS = DefaultPromptFactory()
EXAMPLE_PROMPTS = PROMPTS.example_prompts()
EXAMPLE_ICONS = ["🪐", "💻", "📈", "🌤️"]

# ---------------------------
# Session state init
# ---------------------------
st_session = st.session_state
st_session.setdefault("ctx", None)
st_session.setdefault("auth_mode", "signin")
st_session.setdefault("auth_error", None)
st_session.setdefault("editing_id", None)
st_session.setdefault("confirm_delete_id", None)
st_session.setdefault("level", ReadingLevel.CHILD.value)


# ---------------------------
# Helpers
# ---------------------------
def browser_token() -> str:
    """Per-browser token kept in the URL (?sid=...), so a reload finds the same login."""
    token = st.query_params.get("sid")
    if not token:
        token = new_browser_token()
        st.query_params["sid"] = token
    return token


def rotate_browser_token(ctx: AppContext):
    token = new_browser_token()
    st.query_params["sid"] = token
    ctx.use_browser(token)


def get_context() -> AppContext:
    """Build the app context once per browser session and restore the login."""
    if st_session.ctx is None:
        ctx = build_context(get_settings(), browser_token())
        ctx.restore()
        st_session.ctx = ctx
    return st_session.ctx


def level_enum() -> ReadingLevel:
    """Return the selected reading level as enum."""
    return ReadingLevel(st_session.level)


def format_time(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000).strftime("%H:%M")


def toggle_auth_mode():
    st_session.auth_mode = "register" if st_session.auth_mode == "signin" else "signin"
    st_session.auth_error = None


def submit_auth(ctx: AppContext, name: str, email: str, password: str):
    """Sign in or register; failures render inline in the form."""
    st_session.auth_error = None
    try:
        if st_session.auth_mode == "signin":
            user = ctx.auth.sign_in(email, password)
        else:
            user = ctx.auth.register(name, email, password)
    except AlreadyExists as e:
        st_session.auth_error = str(e)
        st_session.auth_mode = "signin"
        return
    except Eli5Error as e:
        st_session.auth_error = str(e)
        return
    rotate_browser_token(ctx)
    ctx.login(user)


def on_new_chat(ctx: AppContext):
    st_session.editing_id = None
    ctx.sessions.create_session(ctx.user.id)


def on_select(ctx: AppContext, session_id: str):
    ctx.sessions.select(session_id)


def on_start_rename(session: ChatSession):
    st_session.editing_id = session.id
    st_session[f"rename_{session.id}"] = session.title


def on_save_rename(ctx: AppContext, session_id: str):
    ctx.sessions.rename_session(session_id, st_session.get(f"rename_{session_id}", ""))
    st_session.editing_id = None


def on_ask_delete(session_id: str):
    st_session.confirm_delete_id = session_id


def on_confirm_delete(ctx: AppContext, session_id: str):
    ctx.sessions.delete_session(session_id)
    st_session.confirm_delete_id = None


def on_cancel_delete():
    st_session.confirm_delete_id = None


def on_example(ctx: AppContext, prompt: str):
    ctx.conversation.start_example(ctx.user.id, level_enum(), prompt)


def on_logout(ctx: AppContext):
    ctx.logout()
    rotate_browser_token(ctx)
    st_session.editing_id = None
    st_session.confirm_delete_id = None


def render_message(msg: Message):
    avatar = "🧑" if msg.role == "user" else "🧠"
    with st.chat_message("user" if msg.role == "user" else "assistant", avatar=avatar):
        if msg.role == "user" and msg.level is not None:
            st.caption(f"Level: {msg.level.value}")
        if msg.role == "model" and not msg.content:
            st.markdown("_Thinking…_")
        elif msg.role == "model" and is_failure_reply(msg.content):
            st.error(msg.content)
        else:
            st.markdown(msg.content)
        st.caption(format_time(msg.timestamp))


# ---------------------------
# Auth page
# ---------------------------
def render_auth(ctx: AppContext):
    is_login = st_session.auth_mode == "signin"
    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        st.title("Sign in to ELI5" if is_login else "Join ELI5 Bot")
        st.caption(
            "Continue simplifying the world"
            if is_login
            else "Start your journey of clarity today"
        )
        if st_session.auth_error:
            st.error(st_session.auth_error)

        with st.form("auth_form"):
            name = ""
            if not is_login:
                name = st.text_input("Name", placeholder="How should we call you?")
            email = st.text_input("Email", placeholder="you@example.com")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button(
                "Sign In" if is_login else "Create My Account", type="primary"
            )
        if submitted:
            submit_auth(ctx, name, email, password)
            st.rerun()

        st.button(
            "Don't have an account? Register"
            if is_login
            else "Already have an account? Sign in",
            on_click=toggle_auth_mode,
        )


# ---------------------------
# Sidebar: saved explanations
# ---------------------------
def render_sidebar(ctx: AppContext):
    with st.sidebar:
        st.button(
            "New Chat",
            type="primary",
            use_container_width=True,
            on_click=on_new_chat,
            args=(ctx,),
        )
        st.divider()

        if not ctx.sessions.sessions:
            st.caption("No chats yet")

        for session in ctx.sessions.sessions:
            if st_session.editing_id == session.id:
                st.text_input(
                    "Rename",
                    key=f"rename_{session.id}",
                    label_visibility="collapsed",
                    on_change=on_save_rename,
                    args=(ctx, session.id),
                )
                continue

            if st_session.confirm_delete_id == session.id:
                st.warning("Delete this chat?")
                c1, c2 = st.columns(2)
                c1.button(
                    "Delete",
                    key=f"confirm_{session.id}",
                    type="primary",
                    on_click=on_confirm_delete,
                    args=(ctx, session.id),
                )
                c2.button("Cancel", key=f"cancel_{session.id}", on_click=on_cancel_delete)
                continue

            c1, c2, c3 = st.columns([6, 1, 1])
            c1.button(
                session.title,
                key=f"open_{session.id}",
                use_container_width=True,
                type="secondary"
                if session.id != ctx.sessions.active_session_id
                else "primary",
                on_click=on_select,
                args=(ctx, session.id),
            )
            c2.button(
                "✏️", key=f"edit_{session.id}", help="Rename",
                on_click=on_start_rename, args=(session,),
            )
            c3.button(
                "🗑️", key=f"del_{session.id}", help="Delete",
                on_click=on_ask_delete, args=(session.id,),
            )

        st.divider()
        st.markdown(f"**{ctx.user.name}**")
        st.caption(ctx.user.email)
        st.button("Logout", on_click=on_logout, args=(ctx,))


# ---------------------------
# Main: conversation view / welcome
# ---------------------------
def render_conversation(ctx: AppContext, session: ChatSession):
    st.radio(
        "Reading level",
        READING_LEVELS,
        key="level",
        horizontal=True,
    )
    st.caption(PROMPTS.level_prompt(level_enum()))

    transcript = st.container(height=560, border=False)
    with transcript:
        if not session.messages:
            st.info("Ask me to explain something complex...")
        for msg in session.messages:
            render_message(msg)

    text = st.chat_input(
        "Ask me to explain something complex...",
        disabled=ctx.conversation.is_pending,
    )
    if text is not None and text.strip():
        with st.spinner("Simplifying…"):
            ctx.conversation.send_message(session.id, level_enum(), text)
        st.rerun()


def render_welcome(ctx: AppContext):
    st.header(f"Hi, {ctx.user.first_name}")
    st.markdown("What complex topic should we simplify today?")

    cols = st.columns(2)
    for i, (prompt, icon) in enumerate(zip(EXAMPLE_PROMPTS, EXAMPLE_ICONS)):
        cols[i % 2].button(
            f"{icon} {prompt}",
            key=f"example_{i}",
            use_container_width=True,
            on_click=on_example,
            args=(ctx, prompt),
        )

    st.button("New Conversation", type="primary", on_click=on_new_chat, args=(ctx,))


ctx = get_context()

if ctx.user is None:
    render_auth(ctx)
else:
    render_sidebar(ctx)
    st.title("ELI5 Bot")
    active = ctx.sessions.active_session
    if active is not None:
        render_conversation(ctx, active)
    else:
        render_welcome(ctx)
