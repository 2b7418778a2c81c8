"""Agent source synthesis.

Two entry points produce the TypeScript artifact handed back to the UI:

- `customize_template` rewrites a built-in template body with an ordered set of
  regex substitutions. Matching is purely textual; a pattern that finds nothing
  leaves the original literal in place.
- `generate_agent_code` assembles a file from scratch out of fixed boilerplate,
  optional blocks selected by the customization flags, and interpolated config
  values.

Neither function validates the produced text; it is never parsed or run.
"""

from __future__ import annotations

import re
from decimal import Decimal

from .models import AgentConfig, AgentTemplate

MODEL_SYMBOLS = {
    "gemini": "GoogleGenerativeAI",
    "mistral": "Mistral",
}
MODEL_IDS = {
    "gemini": "gemini-pro",
    "mistral": "mistral-large",
}
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

_MANAGER_NAME_RE = re.compile(r"RAG Manager|Chat Manager|Tool Manager")
_WORKER_LOOP_RE = re.compile(r"for \(let i = 0; i < \d+; i\+\+\)")
_TEMPERATURE_RE = re.compile(r"temperature: [0-9.]+")
_MAX_TOKENS_RE = re.compile(r"maxTokens: \d+")
_DESCRIPTION_RE = re.compile(r'description: ".*?"')
_WHITESPACE_RE = re.compile(r"\s+")


def _constructor_re(symbol: str) -> re.Pattern:
    # Single-line `new X({ model: "..." })` and the multi-line form where the
    # options object opens on the constructor line.
    return re.compile(r"new " + re.escape(symbol) + r'\(\{(\s*)model: "[^"]*"')


_CONSTRUCTOR_RES = {model: _constructor_re(symbol) for model, symbol in MODEL_SYMBOLS.items()}


def js_number(value: float | int) -> str:
    """Render a number the way a JavaScript template literal would.

    Uses the shortest round-trip digits (as `repr` does) but JavaScript's
    layout: `1` not `1.0`, and plain decimals from 1e-6 up to (not including) 1e21.
    """
    number = float(value)
    if number == 0:
        return "0"
    if number != number:
        return "NaN"
    if number in (float("inf"), float("-inf")):
        return "Infinity" if number > 0 else "-Infinity"

    _sign, digit_tuple, exponent = Decimal(repr(abs(number))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    n = k + exponent
    prefix = "-" if number < 0 else ""

    if k <= n <= 21:
        return prefix + digits + "0" * (n - k)
    if 0 < n <= 21:
        return prefix + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return prefix + "0." + "0" * -n + digits
    power = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{prefix}{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"


def export_identifier(name: str) -> str:
    """`create<Name>` with whitespace stripped; nothing else is sanitized."""
    return "create" + _WHITESPACE_RE.sub("", name or "")


def _swap_model(code: str, target: str) -> str:
    source = "mistral" if target == "gemini" else "gemini"
    target_symbol = MODEL_SYMBOLS[target]
    source_symbol = MODEL_SYMBOLS[source]
    target_id = MODEL_IDS[target]

    code = _CONSTRUCTOR_RES[source].sub(
        lambda m: f'new {target_symbol}({{{m.group(1)}model: "{target_id}"',
        code,
    )
    return code.replace(f"{source_symbol},", f"{target_symbol},")


def customize_template(template: AgentTemplate, config: AgentConfig) -> str:
    code = template.code
    customization = config.customization

    manager_name = f"{config.name} Manager"
    code = _MANAGER_NAME_RE.sub(lambda _m: manager_name, code)

    code = _swap_model(code, config.model)

    # Only the first counting loop; templates spawn workers in their first loop.
    code = _WORKER_LOOP_RE.sub(
        lambda _m: f"for (let i = 0; i < {config.worker_count}; i++)",
        code,
        count=1,
    )

    temperature = f"temperature: {js_number(customization.temperature)}"
    code = _TEMPERATURE_RE.sub(lambda _m: temperature, code)
    max_tokens = f"maxTokens: {customization.max_tokens}"
    code = _MAX_TOKENS_RE.sub(lambda _m: max_tokens, code)

    if config.description:
        description = f'description: "{config.description}"'
        code = _DESCRIPTION_RE.sub(lambda _m: description, code)

    return code


# ── From-scratch blocks ────────────────────────────────────

_TOOLS_BLOCK = """
  // Define tools
  const tools = [
    new FunctionTool({
      name: "search_information",
      description: "Search for information on a given topic",
      func: async (query: string) => {
        // Implement actual search functionality here
        return `Results for: ${query}`;
      },
      parameters: {
        type: "object",
        properties: {
          query: {
            type: "string",
            description: "The search query",
          },
        },
        required: ["query"],
      },
    }),
    // Add more tools as needed
  ];
"""

_MEMORY_BLOCK = """
  // Initialize chat history for memory
  const chatHistory = new ChatHistory();
"""

_RETRIEVAL_BLOCK = """
  // Initialize vector store for retrieval
  // Note: In a real implementation, you would load actual documents
  const documents = [
    // Add your documents here
  ];
  \n  // Create vector store index
  const index = await VectorStoreIndex.fromDocuments(documents, { serviceContext });
  \n  // Create retriever
  const retriever = index.asRetriever();
"""

_MEMORY_RECORD_REQUEST = (
    "// Add task to memory\n"
    "    chatHistory.addMessage(\n"
    "      new ChatMessage({\n"
    '        role: "user",\n'
    "        content: task.description,\n"
    "      })\n"
    "    );\n"
    "\n"
    "    "
)

_MEMORY_RECORD_RESULT = (
    "// Add result to memory\n"
    "    chatHistory.addMessage(\n"
    "      new ChatMessage({\n"
    '        role: "assistant",\n'
    "        content: finalResult.toString(),\n"
    "      })\n"
    "    );\n"
    "\n"
    "    "
)


def _header_block(config: AgentConfig) -> str:
    customization = config.customization
    symbol = MODEL_SYMBOLS[config.model]
    memory_imports = ",\n  ChatMessage,\n  ChatHistory" if customization.use_memory else ""
    # A zero value falls back to the default, as the browser build did.
    temperature = js_number(customization.temperature or DEFAULT_TEMPERATURE)
    max_tokens = customization.max_tokens or DEFAULT_MAX_TOKENS

    return (
        "import { \n"
        "  SimpleDirectoryReader, \n"
        "  VectorStoreIndex, \n"
        "  serviceContextFromDefaults,\n"
        f"  {symbol},\n"
        "  ContextChatEngine,\n"
        "  AgentRunner,\n"
        "  Task,\n"
        "  TaskStep,\n"
        "  TaskStatus,\n"
        "  ToolOutput,\n"
        f"  FunctionTool{memory_imports}\n"
        '} from "llamaindex";\n'
        "\n"
        "/**\n"
        f" * {config.name}\n"
        f" * {config.description}\n"
        " * \n"
        " * Created with Agent Generator\n"
        f" * Model: {config.model}\n"
        f" * Workers: {config.worker_count}\n"
        " */\n"
        f"const {export_identifier(config.name)} = async () => {{\n"
        f"  // Initialize the {config.model} model\n"
        f"  const model = new {symbol}({{ \n"
        f'    model: "{MODEL_IDS[config.model]}",\n'
        f"    temperature: {temperature},\n"
        f"    maxTokens: {max_tokens}\n"
        "  });\n"
        "  \n"
        "  // Create service context\n"
        "  const serviceContext = serviceContextFromDefaults({\n"
        "    llm: model,\n"
        "  });\n"
    )


def _task_literal(task: str) -> str:
    return (
        "new Task({\n"
        f'      description: "{task}",\n'
        f'      expectedOutputs: ["Completed {task}"],\n'
        "    })"
    )


def _agents_block(config: AgentConfig) -> str:
    use_tools = config.customization.use_tools
    manager_tools = "\n    tools," if use_tools else ""
    worker_tools = "\n        tools," if use_tools else ""
    tasks = ",\n    ".join(_task_literal(task) for task in config.tasks)

    return (
        "\n"
        "  // Manager agent configuration\n"
        "  const managerAgent = new AgentRunner({\n"
        f'    name: "{config.name} Manager",\n'
        f'    description: "{config.description}",\n'
        f"    llm: model,{manager_tools}\n"
        "  });\n"
        "\n"
        "  // Worker agents\n"
        "  const workerAgents = [];\n"
        f"  for (let i = 0; i < {config.worker_count}; i++) {{\n"
        "    workerAgents.push(\n"
        "      new AgentRunner({\n"
        "        name: `Worker Agent ${i+1}`,\n"
        '        description: "Worker agent that completes assigned subtasks",\n'
        f"        llm: model,{worker_tools}\n"
        "      })\n"
        "    );\n"
        "  }\n"
        "\n"
        "  // Define tasks\n"
        "  const predefinedTasks = [\n"
        f"    {tasks}\n"
        "  ];\n"
    )


def _execute_block(config: AgentConfig) -> str:
    customization = config.customization
    record_request = _MEMORY_RECORD_REQUEST if customization.use_memory else ""
    record_result = _MEMORY_RECORD_RESULT if customization.use_memory else ""
    exported_memory = "\n    chatHistory," if customization.use_memory else ""
    exported_retrieval = "\n    index,\n    retriever," if customization.use_retrieval else ""

    return (
        "\n"
        "  // Execute tasks with manager-worker topology\n"
        "  const executeTask = async (task) => {\n"
        f"    {record_request}// Manager creates subtasks\n"
        "    const subtasks = await managerAgent.createSubtasks(task);\n"
        "    \n"
        "    // Distribute subtasks to workers\n"
        "    const results = await Promise.all(\n"
        "      subtasks.map((subtask, index) => {\n"
        "        const workerIndex = index % workerAgents.length;\n"
        "        return workerAgents[workerIndex].executeTask(subtask);\n"
        "      })\n"
        "    );\n"
        "    \n"
        "    // Manager compiles results\n"
        "    const finalResult = await managerAgent.compileResults(results);\n"
        "    \n"
        f"    {record_result}return finalResult;\n"
        "  };\n"
        "\n"
        "  return {\n"
        "    executeTask,\n"
        "    managerAgent,\n"
        f"    workerAgents,{exported_memory}{exported_retrieval}\n"
        "    predefinedTasks\n"
        "  };\n"
        "};\n"
        "\n"
        f"export default {export_identifier(config.name)};\n"
    )


def generate_agent_code(config: AgentConfig) -> str:
    customization = config.customization
    code = _header_block(config)
    if customization.use_tools:
        code += _TOOLS_BLOCK
    if customization.use_memory:
        code += _MEMORY_BLOCK
    if customization.use_retrieval:
        code += _RETRIEVAL_BLOCK
    code += _agents_block(config)
    code += _execute_block(config)
    return code
