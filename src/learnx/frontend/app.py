"""Streamlit frontend for LearnX."""

import streamlit as st

from learnx.core.config import get_settings, setup_logging
from learnx.core.errors import ConfigurationError, GalleryError
from learnx.core.gallery import create_gallery_backend
from learnx.frontend.client import FunctionsClient
from learnx.frontend.controllers import (
    ContentWriterController,
    GalleryController,
    ImageAnalysisController,
    ImageGeneratorController,
    SlideGeneratorController,
    SpeechSynthesisController,
    TranscriptionController,
    download_filename,
    format_created_at,
    load_image_bytes,
)

# Page configuration
st.set_page_config(
    page_title="LearnX - AI-Powered Learning Platform",
    page_icon="🎓",
    layout="wide",
)

PAGES = ["Home", "Dashboard", "Create", "Audio", "Gallery"]
CREATE_TABS = {
    "image": "🎨 Image",
    "analysis": "🔍 Analysis",
    "writer": "📝 Writer",
    "slides": "📊 Slides",
}
AUDIO_TABS = {"tts": "🔊 Text to Speech", "stt": "🎤 Speech to Text"}

TOOLS = [
    {
        "title": "Image Generator",
        "description": "Create stunning images from text descriptions using AI.",
        "icon": "🎨",
        "page": "Create",
        "tab": "image",
    },
    {
        "title": "Image Analysis",
        "description": "Analyze and understand images with AI-powered insights.",
        "icon": "🔍",
        "page": "Create",
        "tab": "analysis",
    },
    {
        "title": "Content Writer",
        "description": "Generate high-quality written content with AI assistance for any purpose.",
        "icon": "📝",
        "page": "Create",
        "tab": "writer",
    },
    {
        "title": "Slide Generator",
        "description": "Generate presentation slides from your content with AI-powered breakdown.",
        "icon": "📊",
        "page": "Create",
        "tab": "slides",
    },
    {
        "title": "Audio Tools",
        "description": "Convert text to speech and transcribe audio with advanced AI.",
        "icon": "🎧",
        "page": "Audio",
        "tab": "tts",
    },
]


# ============================================================================
# Session Management
# ============================================================================


@st.cache_resource
def get_gallery_backend():
    """Shared gallery repository and realtime fan-out for this server process.

    Every session's GalleryController listens on the one fan-out, so the
    realtime channel is joined once however many browser sessions are open.
    """
    return create_gallery_backend(get_settings())


def get_controllers() -> dict:
    """Get or create the per-session page controllers."""
    if "controllers" not in st.session_state:
        repository, feed = get_gallery_backend()
        client = FunctionsClient()
        st.session_state.controllers = {
            "image": ImageGeneratorController(client, repository),
            "analysis": ImageAnalysisController(client),
            "writer": ContentWriterController(client),
            "slides": SlideGeneratorController(client),
            "stt": TranscriptionController(client),
            "tts": SpeechSynthesisController(),
            "gallery": GalleryController(repository, feed),
        }
    return st.session_state.controllers


def open_tool(page: str, tab: str) -> None:
    st.session_state.page = page
    if not tab:
        return
    if page == "Create":
        st.session_state.create_tab = tab
    else:
        st.session_state.audio_tab = tab


def show_notice(controller) -> None:
    """Render a controller's pending notice as a toast."""
    notice = controller.pop_notice()
    if notice is None:
        return
    text = f"**{notice.title}**"
    if notice.description:
        text += f"\n\n{notice.description}"
    st.toast(text, icon="⚠️" if notice.destructive else "✅")


def show_image(image_url: str, caption: str | None = None) -> bytes | None:
    """Display an image URL or data-URI and return its bytes when available."""
    try:
        data = load_image_bytes(image_url)
    except (GalleryError, ValueError) as e:
        st.error(f"Could not load image: {e}")
        return None
    st.image(data, caption=caption, use_container_width=True)
    return data


# ============================================================================
# Pages
# ============================================================================


def render_home():
    """Render the landing hero."""
    st.caption("✨ AI-Powered Learning")
    st.title("Learn Smarter with LearnX")
    st.write(
        "Create images, analyze content, generate audio, and build presentations, "
        "all powered by AI."
    )
    st.button("Get Started →", type="primary", on_click=open_tool, args=("Dashboard", ""))

    features = [
        ("🎨", "Text to Image"),
        ("🔍", "Image Analysis"),
        ("🔊", "Text to Audio"),
        ("🎤", "Speech to Text"),
    ]
    for col, (icon, label) in zip(st.columns(len(features)), features):
        with col:
            st.markdown(f"### {icon}\n{label}")


def render_dashboard():
    """Render the tool picker."""
    st.header("Choose a Tool")
    st.caption("Select a tool to start creating with AI")

    columns = st.columns(3)
    for index, tool in enumerate(TOOLS):
        with columns[index % 3]:
            with st.container(border=True):
                st.subheader(f"{tool['icon']} {tool['title']}")
                st.write(tool["description"])
                st.button(
                    "Open",
                    key=f"open_{tool['tab']}",
                    on_click=open_tool,
                    args=(tool["page"], tool["tab"]),
                )


def render_image_tab(controller: ImageGeneratorController):
    st.subheader("Text to Image")
    prompt = st.text_area(
        "Prompt",
        placeholder="Describe the image you want to generate...",
        key="image_prompt",
    )
    if st.button("Generate Image", type="primary", disabled=controller.busy):
        with st.spinner("Generating image..."):
            controller.generate(prompt)
    show_notice(controller)

    outcome = controller.result
    if outcome:
        data = show_image(outcome.image_url, caption=outcome.message)
        if not outcome.saved:
            st.warning(f"Not saved to gallery: {outcome.save_error}")
        if data:
            st.download_button(
                "⬇️ Download Image",
                data=data,
                file_name=download_filename("generated-image"),
                mime="image/png",
            )


def render_analysis_tab(controller: ImageAnalysisController):
    st.subheader("Image Analysis")
    uploaded = st.file_uploader(
        "Click to upload an image",
        type=["png", "jpg", "jpeg", "gif", "webp"],
        key="analysis_upload",
    )
    if uploaded:
        st.image(uploaded, caption="Preview", width=320)

    if st.button("Analyze Image", type="primary", disabled=controller.busy or not uploaded):
        with st.spinner("Analyzing image..."):
            controller.analyze(uploaded.getvalue(), uploaded.type or "image/png")
    show_notice(controller)

    if controller.result:
        st.markdown("**Analysis Result:**")
        st.markdown(controller.result)


def render_writer_tab(controller: ContentWriterController):
    st.subheader("Content Writer")
    prompt = st.text_area(
        "Topic",
        placeholder="Enter a topic or prompt for content generation...",
        key="writer_prompt",
    )
    if st.button("Generate Content", type="primary", disabled=controller.busy):
        with st.spinner("Writing..."):
            controller.write(prompt)
    show_notice(controller)

    if controller.result:
        st.markdown(controller.result)


def render_slides_tab(controller: SlideGeneratorController):
    st.subheader("Slide Generator")
    content = st.text_area(
        "Content",
        placeholder="Paste the content you want to turn into slides...",
        height=200,
        key="slides_content",
    )
    if st.button("Generate Slides", type="primary", disabled=controller.busy):
        with st.spinner("Planning slides..."):
            controller.generate(content)
    show_notice(controller)

    if controller.result:
        st.markdown(controller.result)
        st.download_button(
            "⬇️ Download Outline",
            data=controller.result,
            file_name="slides.md",
            mime="text/markdown",
        )


def render_create(controllers: dict):
    st.header("Create Content")
    tab = st.radio(
        "Tool",
        options=list(CREATE_TABS),
        format_func=CREATE_TABS.get,
        horizontal=True,
        key="create_tab",
        label_visibility="collapsed",
    )
    if tab == "image":
        render_image_tab(controllers["image"])
    elif tab == "analysis":
        render_analysis_tab(controllers["analysis"])
    elif tab == "writer":
        render_writer_tab(controllers["writer"])
    else:
        render_slides_tab(controllers["slides"])


def render_tts_tab(controller: SpeechSynthesisController):
    st.subheader("Text to Speech")
    text = st.text_area(
        "Text", placeholder="Enter text to convert to speech...", key="tts_text"
    )
    col1, col2, col3 = st.columns(3)
    with col1:
        rate = st.slider("Speed", 0.5, 2.0, 1.0, 0.1)
    with col2:
        pitch = st.slider("Pitch", 0.5, 2.0, 1.0, 0.1)
    with col3:
        volume = st.slider("Volume", 0.0, 1.0, 1.0, 0.1)

    play_col, stop_col = st.columns(2)
    with play_col:
        if st.button("▶️ Speak", type="primary", disabled=controller.busy):
            with st.spinner("Synthesizing..."):
                controller.speak(text, rate=rate, pitch=pitch, volume=volume)
    with stop_col:
        if st.button("⏹️ Stop", disabled=controller.result is None):
            controller.stop()
    show_notice(controller)

    if controller.result:
        st.audio(controller.result, format="audio/mp3", autoplay=True)


def render_stt_tab(controller: TranscriptionController):
    st.subheader("Speech to Text")
    uploaded = st.file_uploader(
        "Click to upload an audio file",
        type=["mp3", "wav", "m4a", "ogg", "webm"],
        key="stt_upload",
    )
    if uploaded:
        st.audio(uploaded)

    if st.button("Transcribe Audio", type="primary", disabled=controller.busy or not uploaded):
        with st.spinner("Transcribing..."):
            controller.transcribe(uploaded.getvalue(), uploaded.type or "audio/mpeg")
    show_notice(controller)

    if controller.result:
        st.markdown("**Transcription:**")
        st.write(controller.result)


def render_audio(controllers: dict):
    st.header("Audio Tools")
    tab = st.radio(
        "Tool",
        options=list(AUDIO_TABS),
        format_func=AUDIO_TABS.get,
        horizontal=True,
        key="audio_tab",
        label_visibility="collapsed",
    )
    if tab == "tts":
        render_tts_tab(controllers["tts"])
    else:
        render_stt_tab(controllers["stt"])


@st.dialog("Image Details", width="large")
def render_image_details(controller: GalleryController):
    record = controller.selected
    if record is None:
        return

    data = show_image(record.image_url)
    st.markdown("**Prompt**")
    st.write(record.prompt)
    st.caption(f"Generated on {format_created_at(record)}")

    col1, col2 = st.columns(2)
    with col1:
        if data:
            st.download_button(
                "⬇️ Download",
                data=data,
                file_name=download_filename(),
                mime="image/png",
            )
    with col2:
        if st.button("🗑️ Delete", type="primary"):
            controller.delete(record.id)
            st.rerun()


@st.fragment(run_every="5s")
def render_gallery_grid(controller: GalleryController):
    """Re-render the grid from state the realtime feed keeps current."""
    if controller.loading:
        st.info("Loading images...")
        return

    if not controller.images:
        with st.container(border=True):
            st.subheader("No images yet")
            st.write("Generate your first image to see it here.")
            st.button("Generate Image", on_click=open_tool, args=("Create", "image"))
        return

    columns = st.columns(3)
    for index, image in enumerate(controller.images):
        with columns[index % 3]:
            with st.container(border=True):
                try:
                    st.image(load_image_bytes(image.image_url), use_container_width=True)
                except (GalleryError, ValueError):
                    st.caption("Image unavailable")
                st.write(image.prompt if len(image.prompt) <= 80 else image.prompt[:80] + "...")
                st.caption(format_created_at(image))
                if st.button("View Details", key=f"view_{image.id}"):
                    controller.select(image.id)
                    render_image_details(controller)


def render_gallery(controller: GalleryController):
    st.header("Your Gallery")
    st.caption("View and manage all your AI-generated images")

    if not st.session_state.get("gallery_started"):
        try:
            controller.start()
        except GalleryError as e:
            st.error(f"Realtime updates unavailable: {e}")
        st.session_state.gallery_started = True

    show_notice(controller)
    render_gallery_grid(controller)


# ============================================================================
# Main App
# ============================================================================


def main():
    """Main application."""
    setup_logging()

    try:
        get_settings()
    except ConfigurationError as e:
        st.error(str(e))
        st.stop()

    controllers = get_controllers()

    with st.sidebar:
        st.header("🎓 LearnX")
        page = st.radio("Navigate", PAGES, key="page")

    if page == "Home":
        render_home()
    elif page == "Dashboard":
        render_dashboard()
    elif page == "Create":
        render_create(controllers)
    elif page == "Audio":
        render_audio(controllers)
    else:
        render_gallery(controllers["gallery"])


if __name__ == "__main__":
    main()
