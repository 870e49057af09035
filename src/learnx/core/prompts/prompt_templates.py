"""Prompt templates for the gateway handlers.

These templates use {placeholder} syntax for string formatting.
"""

# =============================================================================
# Image Templates
# =============================================================================

GENERATE_IMAGE_MESSAGE = """\
Generate an educational and visually appealing image based on this description: \
{prompt}. Make it clear, colorful, and suitable for learning purposes.\
"""

EXPLAIN_IMAGE_MESSAGE = """\
Analyze this image and provide a detailed, student-friendly explanation. Break down complex concepts into clear bullet points. Focus on:
1. What is shown in the image
2. Key elements and their significance
3. Educational value and learning points
4. Any interesting facts or context

Format your response in a clear, easy-to-read manner with sections and bullet points.\
"""

IMAGE_DATA_URI = "data:{mime_type};base64,{data}"

# =============================================================================
# Text Templates
# =============================================================================

GENERATE_CONTENT_MESSAGE = """\
Write comprehensive, high-quality content about: {prompt}

Include:
- An engaging introduction
- Well-organized main sections with clear headings
- Key points and insights
- Practical examples or applications where relevant
- A thoughtful conclusion

Make the content informative, engaging, and easy to read.\
"""

ANALYZE_SLIDES_MESSAGE = """\
Analyze the following content and create a professional presentation outline with slides.

Content to analyze:
{content}

For each slide, provide:
1. **Slide Title**: A clear, concise title
2. **Key Points**: 3-5 bullet points (keep each brief - max 10 words)
3. **Visual Suggestion**: What image or diagram would enhance this slide
4. **Speaker Notes**: Brief notes for the presenter

Create 5-8 slides that effectively communicate the main ideas. Format each slide clearly.\
"""

# =============================================================================
# Audio Templates
# =============================================================================

TRANSCRIBE_AUDIO_MESSAGE = (
    "Please transcribe the speech in this audio file. Provide the full text transcription."
)
