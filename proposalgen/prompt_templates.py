PLACEHOLDER = "{JOB_DESCRIPTION}"

PERSONA_STORAGE_KEY = "aiProposalGeneratorSystemInstruction"

DEFAULT_MODEL = "gpt-4o-mini"

DEFAULT_PERSONA_INSTRUCTION = (
    "You are an expert proposal writer with extensive experience in crafting compelling "
    "business documents. Your primary goal is to assist users by generating comprehensive, "
    "professional, and persuasive project proposals based on the provided job description. "
    "Your tone should be formal and authoritative."
)

DEFAULT_TASK_TEMPLATE = (
    "Based on the provided job description, generate a project proposal.\n\n"
    "The proposal must:\n"
    "1.  Demonstrate a clear understanding of the job requirements and client needs.\n"
    "2.  Outline a strategic approach and proposed solution to address these needs.\n"
    "3.  Highlight key deliverables and expected outcomes.\n"
    "4.  (If applicable and inferable from the job description) Suggest a potential timeline or project phases.\n"
    "5.  Emphasize unique selling points or strengths that make the proposed solution a strong fit.\n"
    "6.  Be written in formal, professional business English.\n"
    "7.  Be well-structured with clear headings (e.g., ## Introduction, ## Understanding the Requirements, "
    "## Proposed Solution, ## Key Deliverables, ## Timeline (Optional), ## Why Choose Us, ## Conclusion). "
    "Use markdown for formatting.\n"
    "8.  Use bullet points for lists to enhance readability.\n\n"
    "Job Description:\n"
    "---\n"
    "{JOB_DESCRIPTION}\n"
    "---\n\n"
    "Proposal Output (in Markdown format):\n"
)
