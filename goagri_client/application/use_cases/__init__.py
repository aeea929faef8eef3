"""
Use Cases

Each use case owns one slice of the session engine: cart reconciliation,
guest cart merge, reward stack, order placement, data refresh, address
book, loyalty and live inventory sync. Import them from their modules;
they all depend on session_state, which itself needs the reward stack.
"""
