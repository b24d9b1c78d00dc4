CHUNK_SUMMARY_PROMPT: str = """Summarize the following diff excerpt concisely and technically (answer in the same language as the content):

{chunk}"""

COMBINE_SUMMARY_PROMPT: str = """Summarize the following set of diff summaries succinctly and technically in a single paragraph that captures the most important changes:

{summaries}"""

SUMMARIZE_INSTRUCTION: str = """{language_instruction}
Summarize the following content concisely and technically. Be direct and focus on the changes and their impact. Keep code identifiers in the language they were written in:

{text}"""

LANGUAGE_INSTRUCTION: str = "Please respond entirely in {language}."

FILE_BLOCK: str = """
**{filename}:**
```
{diff}
```"""

ANALYZE_PROMPT: str = """Assume the role of a senior code reviewer.

Analyze in detail the following code changes (commits) provided:

{diffs}

For each modified file, organize your analysis as follows:

**File: [File Name]**

1.  **Detailed Summary of Modifications:**
    * What was the main objective and expected impact of the changes in this file?
    * Describe the main functionalities or logic that were added, removed, or significantly altered.

2.  **Identification of Errors, Potential Bugs, and Vulnerabilities:**
    * Are there logic errors, exception handling failures, race conditions, memory leaks, or other bugs?
    * Were security vulnerabilities introduced or neglected (e.g., SQL Injection, XSS, insecure input handling)?
    * For each identified item, quote the relevant code snippet, explain the nature of the problem and describe its potential impact.

3.  **Improvement and Optimization Suggestions (with justifications):**
    * Can the code be refactored to increase clarity, readability, or maintainability?
    * Are there opportunities to optimize performance?
    * Can the testability of the code be improved? How?

4.  **Best Practices and Code Quality Recommendations:**
    * Evaluate naming, function size and responsibility, coupling and cohesion.
    * Does the code follow the language or project style conventions (if known)?
    * Are comments adequate?

**General Considerations about the Commit (if applicable):**
* Do the changes seem cohesive and aligned with a single objective, or do they mix different concerns?
* Are there broader implications for the system architecture or other modules?

Some files may be given as a summary block (/* SUMMARY ... */) instead of a raw diff because the original diff was too large. Review those at the level of detail the summary allows.

Your analysis should be complete, specific, accurate, constructive and objective.

{language_instruction}"""

CREATE_PROMPT: str = """Your task is to generate a commit title and commit message (body) that are accurate, informative, and follow version control best practices. The response should respect the predominant language in the content of the files provided in the diffs.

**Diffs:**
{diffs}

**Internal Analysis Process:**
1.  Identify the central theme or main objective of the modifications.
2.  For each significant change, determine exactly *what* was modified.
3.  Infer *why* only from evidence present in the diffs. If the reason is not evident, describe the "what" and the observable impact instead. Do not invent a motivation.
4.  Consider how the changes affect behavior, performance, security, or maintainability.

**Output Instructions:**

-   **Commit Title:**
    -   {language_instruction}
    -   Start with a relevant emoji (🚀 feature, ✨ improvement, 🐛 fix, 🔧 tooling, 📝 docs, ♻️ refactor, 🔒 security, 📈 performance).
    -   Use an imperative verb ("Add", "Fix", "Refactor", "Remove", "Update", "Improve").
    -   Maximum of 50 characters.

-   **Commit Message (Body):**
    -   {language_instruction}
    -   Describe the main changes clearly, using bullet points or short paragraphs.
    -   Explain the motivation and the project impact when they can be inferred.

-   **Restrictions:** base everything strictly on the diffs, do not paste large portions of them, and do not include personal or sensitive information.

**Response Format (Exactly as in the example):**
Title
Message (body)"""
