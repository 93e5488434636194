"""Codex process gateway.

Import from submodules:
- codex_bridge.gateway.process.abc: CodexProcess (ABC)
- codex_bridge.gateway.process.real: RealCodexProcess
- codex_bridge.gateway.process.fake: FakeCodexProcess
"""
