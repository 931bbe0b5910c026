# services/llm/prompts.py
"""
Prompt templates.  Each builder is a pure function of its inputs so the same
page always produces the same prompt.
"""

from models.page import PageMetadata

SMOKE_TEST_PROMPT = 'Hello, please respond with "OK" if you can read this.'
SMOKE_TEST_EXPECTED = "OK"

CATEGORIZATION_TEMPLATE = """<system>You are a precise content analysis assistant. Your task is to analyze content and provide structured categorization in valid JSON format.</system>

<input>
Title: {title}
Description: {description}
Keywords: {keywords}

Content:
{content}
</input>

<task>
Analyze the content and provide a JSON response with:
1. 2-4 relevant categories that best describe the content
2. A concise 2-3 sentence summary
3. 3-5 specific topics covered in the content
</task>

<format>
{{
    "categories": ["category1", "category2"],
    "summary": "brief summary of the content",
    "topics": ["topic1", "topic2", "topic3"]
}}
</format>

<rules>
- Ensure response is valid JSON
- Keep categories and topics specific and relevant
- Summary should be clear and informative
- Do not include any text outside the JSON structure
</rules>

<response>"""

KNOWLEDGE_TEMPLATE = """<system>You are a knowledgeable curator specializing in organizing and synthesizing information for the category: {category}</system>

<input>
{content}
</input>

<task>
Analyze this new information and provide:
1. Key points and insights
2. Relationship to the {category} category
3. Emerging patterns or trends
4. Potential sub-categories
</task>

<format>
Provide a structured response with clear headings and bullet points.
Focus on accuracy and relevance to the category.
</format>

<response>"""

SUMMARY_TEMPLATE = """<system>You are an expert content summarizer focused on extracting key information and maintaining context.</system>

<input>
Title: {title}
Content: {content}
</input>

<task>
Create a comprehensive yet concise summary that:
1. Captures the main points and key ideas
2. Maintains the original context and meaning
3. Is easy to understand
4. Highlights significant findings or conclusions
</task>

<format>
- Keep the summary to 2-3 clear, informative sentences
- Focus on the most important information
- Maintain a neutral, professional tone
</format>

<response>"""


def build_categorization_prompt(content: str, metadata: PageMetadata, char_limit: int = 2000) -> str:
    return CATEGORIZATION_TEMPLATE.format(
        title=metadata.title,
        description=metadata.description,
        keywords=metadata.keywords,
        content=content[:char_limit],
    )


def build_knowledge_prompt(category: str, content: str) -> str:
    return KNOWLEDGE_TEMPLATE.format(category=category, content=content)


def build_summary_prompt(content: str, metadata: PageMetadata, char_limit: int = 1500) -> str:
    return SUMMARY_TEMPLATE.format(title=metadata.title, content=content[:char_limit])


def compose_knowledge_input(title: str, summary: str) -> str:
    """Text handed to the knowledge refiner for a freshly categorized page."""
    return f"Title: {title}\nSummary: {summary}"
