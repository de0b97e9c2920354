# templates/defaults.py
"""
Plantillas HTML/CSS por defecto para el canal.

Los marcadores usan la sintaxis de ``string.Template``: ``$update_number``,
``$timestamp`` y, en la tarjeta de mercado, ``$symbol``, ``$name``, ``$price_usd``,
``$market_cap``, ``$volume_h24``, ``$price_change_h24``, ``$change_class``,
``$liquidity_usd``, ``$dex_id``.
"""

_BASE_CONTAINER = """
      .container {
        width: 800px;
        height: 400px;
        display: flex;
        align-items: center;
        justify-content: center;
        background: %s;
        font-family: system-ui, -apple-system, sans-serif;
      }
"""

SIMPLE_ANNOUNCEMENT = {
    "name": "Simple Announcement",
    "html": """
      <div class="container">
        <div class="announcement">
          <h1>📢 Update #$update_number</h1>
          <p class="message">Your message here</p>
          <p class="stamp">$timestamp</p>
        </div>
      </div>
    """,
    "css": _BASE_CONTAINER % "linear-gradient(135deg, #6366f1 0%, #2563eb 100%)" + """
      .announcement {
        background: rgba(255, 255, 255, 0.95);
        border-radius: 16px;
        padding: 2rem 3rem;
        box-shadow: 0 8px 32px rgba(0, 0, 0, 0.1);
        text-align: center;
        max-width: 80%;
      }
      h1 { color: #1e293b; font-size: 2.5rem; font-weight: 700; margin: 0 0 1rem 0; }
      .message { color: #475569; font-size: 1.5rem; line-height: 1.6; margin: 0; }
      .stamp { color: #94a3b8; font-size: 0.9rem; margin: 1rem 0 0 0; }
    """,
}

QUOTE_CARD = {
    "name": "Quote Card",
    "html": """
      <div class="container">
        <div class="quote-card">
          <p class="quote">Your inspirational quote here</p>
          <p class="author">- Author Name</p>
        </div>
      </div>
    """,
    "css": _BASE_CONTAINER % "linear-gradient(135deg, #0f172a 0%, #1e293b 100%)" + """
      .quote-card {
        background: rgba(255, 255, 255, 0.95);
        border-radius: 16px;
        padding: 3rem;
        box-shadow: 0 8px 32px rgba(0, 0, 0, 0.2);
        text-align: center;
        max-width: 80%;
      }
      .quote { color: #1e293b; font-size: 1.75rem; line-height: 1.5; font-weight: 500; margin: 0 0 1.5rem 0; }
      .author { color: #64748b; font-size: 1.25rem; font-style: italic; margin: 0; }
    """,
}

EVENT_CARD = {
    "name": "Event Card",
    "html": """
      <div class="container">
        <div class="event-card">
          <div class="date">
            <span class="day">15</span>
            <span class="month">MAR</span>
          </div>
          <div class="content">
            <h2 class="title">Event Title</h2>
            <p class="details">🕒 Time • 📍 Location</p>
            <p class="description">Short description of the event goes here</p>
          </div>
        </div>
      </div>
    """,
    "css": _BASE_CONTAINER % "linear-gradient(135deg, #818cf8 0%, #4f46e5 100%)" + """
      .event-card {
        background: rgba(255, 255, 255, 0.95);
        border-radius: 16px;
        padding: 2rem;
        box-shadow: 0 8px 32px rgba(0, 0, 0, 0.1);
        display: flex;
        gap: 2rem;
        align-items: center;
        max-width: 80%;
      }
      .date { background: #4f46e5; color: white; padding: 1rem; border-radius: 12px; text-align: center; min-width: 100px; }
      .day { display: block; font-size: 2.5rem; font-weight: 700; line-height: 1; margin-bottom: 0.25rem; }
      .month { display: block; font-size: 1.25rem; font-weight: 500; }
      .content { flex: 1; }
      .title { color: #1e293b; font-size: 1.75rem; font-weight: 700; margin: 0 0 0.5rem 0; }
      .details { color: #6366f1; font-size: 1.125rem; margin: 0 0 1rem 0; }
      .description { color: #475569; font-size: 1.125rem; line-height: 1.5; margin: 0; }
    """,
}

MARKET_CARD = {
    "name": "Market Card",
    "html": """
      <div class="card">
        <div class="header">
          <span class="token-name">$name</span>
          <span class="token-symbol">$$$symbol</span>
          <span class="chain-badge">◎ Solana</span>
        </div>
        <div class="stats">
          <div class="stat-item">
            <div class="stat-label">Price</div>
            <div class="stat-value">$$$price_usd</div>
          </div>
          <div class="stat-item">
            <div class="stat-label">24h Change</div>
            <div class="stat-value $change_class">$price_change_h24%</div>
          </div>
          <div class="stat-item">
            <div class="stat-label">Market Cap</div>
            <div class="stat-value">$$$market_cap</div>
          </div>
          <div class="stat-item">
            <div class="stat-label">24h Volume</div>
            <div class="stat-value">$$$volume_h24</div>
          </div>
        </div>
        <div class="footer">Update #$update_number · $dex_id · $timestamp</div>
      </div>
    """,
    "css": """
      body { margin: 0; padding: 0; font-family: 'Inter', system-ui, sans-serif; }
      .card {
        width: 400px;
        height: 220px;
        background: linear-gradient(135deg, #1a1b23 0%, #24252f 100%);
        border-radius: 16px;
        padding: 20px;
        color: white;
        position: relative;
        overflow: hidden;
      }
      .header { display: flex; align-items: center; gap: 8px; margin-bottom: 16px; }
      .token-name { font-size: 24px; font-weight: 600; }
      .token-symbol { font-size: 16px; color: #7289da; }
      .chain-badge { margin-left: auto; background: rgba(255, 255, 255, 0.1); padding: 4px 8px; border-radius: 12px; font-size: 12px; }
      .stats { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; }
      .stat-item { background: rgba(255, 255, 255, 0.05); padding: 10px; border-radius: 8px; }
      .stat-label { font-size: 12px; color: #8a8b94; margin-bottom: 4px; }
      .stat-value { font-size: 16px; font-weight: 500; }
      .change-positive { color: #00ff00; }
      .change-negative { color: #ff0000; }
      .footer { position: absolute; bottom: 10px; left: 20px; font-size: 11px; color: #8a8b94; }
    """,
}

DEFAULT_TEMPLATES = [SIMPLE_ANNOUNCEMENT, QUOTE_CARD, EVENT_CARD, MARKET_CARD]
