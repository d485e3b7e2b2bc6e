import asyncio
from functools import partial
from typing import Optional

from langgraph.graph import StateGraph, START, END
from dotenv import load_dotenv

# Import State
from state import AnalysisState

# Import Nodes
from nodes.catalog import RuleCatalog, DEFAULT_CATALOG
from nodes.resolver import content_resolver_node
from nodes.classifier import classifier_node
from nodes.aggregator import aggregator_node
from nodes.enhancer import enhancer_node

# Load Env
load_dotenv()


def build_graph(catalog: Optional[RuleCatalog] = None):
    """
    Constructs the LangGraph analysis pipeline.

    resolver -> classifier -> aggregator -> (enhancer) -> END
    """
    catalog = catalog or DEFAULT_CATALOG
    builder = StateGraph(AnalysisState)

    # 1. Add Nodes
    builder.add_node("resolver", partial(content_resolver_node, catalog=catalog))
    builder.add_node("classifier", partial(classifier_node, catalog=catalog))
    builder.add_node("aggregator", aggregator_node)
    builder.add_node("enhancer", enhancer_node)

    # 2. Add Edges (The Flow)
    builder.add_edge(START, "resolver")
    builder.add_edge("resolver", "classifier")
    builder.add_edge("classifier", "aggregator")

    # Conditional logic: is this a re-analysis pass?
    def check_reanalysis(state):
        if state.get("is_reanalysis"):
            return "enhancer"
        return END

    builder.add_conditional_edges("aggregator", check_reanalysis, ["enhancer", END])
    builder.add_edge("enhancer", END)

    # 3. Compile
    return builder.compile()


async def _demo():
    from engine import TaggingEngine, EngineConfig

    engine = TaggingEngine(EngineConfig.from_env())

    for name in ["Q1_invoice_draft.pdf", "client_contract_v2.docx", "notes.txt"]:
        result = await engine.analyze({"name": name})
        print(f"\n{name}")
        print(f"  Type: {result.suggested_document_type}")
        if result.suggested_project:
            print(f"  Project: {result.suggested_project.name} "
                  f"({result.suggested_project.confidence:.0%})")
        for tag in result.suggested_tags:
            print(f"  Tag: {tag.name} ({tag.confidence:.0%}) - {tag.rationale}")
        print(f"  Overall: {result.overall_confidence}%")

    document = {
        "id": "demo-1",
        "name": "Q1_invoice_draft.pdf",
        "tags": [{"id": "1", "name": "Important"}],
    }
    result = await engine.reanalyze(document)
    print(f"\nRe-analysis of {document['name']}:")
    for tag in result.suggested_tags:
        print(f"  Tag: {tag.name} ({tag.confidence:.0%})")


if __name__ == "__main__":
    print("Starting Document Tagging Engine...")
    asyncio.run(_demo())
