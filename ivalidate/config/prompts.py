"""LLM prompt templates for research steps."""

# Common instruction to suppress thinking and ensure JSON-only output
# Note: curly braces must be escaped as {{ }} for LangChain templates
JSON_ONLY_INSTRUCTION = """
CRITICAL: You MUST respond with ONLY a valid JSON object.
- Do NOT include any thinking, reasoning, or explanation.
- Do NOT use markdown code blocks.
- Start your response directly with the opening brace
- No text before or after the JSON."""

IDEA_CONTEXT = (
    'STARTUP IDEA: "{one_liner}"\n'
    'TARGET AUDIENCE: "{target_audience}"\n'
    'PROBLEM SOLVED: "{problem}"'
)

REFINE_IDEA_PROMPT = """Refine this startup idea: "{idea}".

Produce a clear one-sentence description, the specific target market and the main problem solved.

{{"one_liner": "A clear, compelling one-sentence description of the refined idea", "target_audience": "Specific target market and user demographics", "problem": "The main problem this startup solves"}}
""" + JSON_ONLY_INSTRUCTION

TARGETING_PROMPT = """You know the most active, relevant online discussion communities for any topic. Find the MOST SPECIFIC communities where people actually discuss this exact problem:

""" + IDEA_CONTEXT + """

Find communities where:
1. People ACTIVELY complain about this specific problem
2. The target audience hangs out and asks questions
3. Users share frustrations and seek solutions
4. Problem-related posts get high engagement

Prioritize NICHE communities over generic ones (e.g. "sweatystartup" instead of "business", "sysadmin" instead of "technology").

{{
  "recommended_communities": [
    {{
      "name": "community_name_without_prefix",
      "reason": "Why this community is relevant",
      "member_count": "estimated size like '2.5M' or 'large'",
      "activity_level": "high|medium|low"
    }}
  ],
  "search_keywords": ["5-8 terms people type when they have this problem"],
  "focus_queries": ["4-6 queries like 'how to solve X' or 'X alternatives'"],
  "pain_point_queries": ["3-5 queries with frustrated language like 'X sucks'"]
}}
""" + JSON_ONLY_INSTRUCTION

CONTENT_ANALYSIS_PROMPT = """You are analyzing online discussions to validate a startup idea. Be completely objective and avoid positive bias.

STARTUP IDEA: "{one_liner}"
TARGET AUDIENCE: "{target_audience}"
PROBLEM BEING SOLVED: "{problem}"

Below are {post_count} posts from relevant communities.

POSTS TO ANALYZE:
{posts}

RULES:
- ONLY mark a quote "frustrated" when the author explicitly expresses anger, annoyance or strong dissatisfaction
- Mark "satisfied" when users mention working solutions or positive experiences
- Mark "neutral" for questions, information sharing and mild concerns
- Only include quotes with relevance_score >= 0.6
- Quote the EXACT text from posts or comments, not summaries
- overall_sentiment is on a 1-10 scale (1=very frustrated, 10=very satisfied)
- Extract at most 15 quotes

{{
  "relevant_quotes": [
    {{
      "text": "exact text from a post",
      "author": "username",
      "community": "community_name",
      "upvotes": 0,
      "url": "post_url",
      "sentiment": "frustrated|neutral|satisfied",
      "relevance_score": 0.8,
      "pain_point_category": "short category",
      "sentiment_confidence": 0.9
    }}
  ],
  "overall_sentiment": 4.2,
  "pain_points": ["specific pain point"],
  "key_insights": ["insight about demand or behavior"],
  "frustration_level": 0.6,
  "total_relevant_posts": 15,
  "analysis_confidence": 0.8
}}
""" + JSON_ONLY_INSTRUCTION

COMPETITOR_PROMPT = """You are a market research expert. Research the competitive landscape for this startup idea:

""" + IDEA_CONTEXT + """

Identify direct competitors, indirect competitors and substitute solutions. For each, report what they do, funding status, common user complaints, strengths, weaknesses, pricing and market position. Also list market gaps, differentiation opportunities and an overall assessment. Only name real companies.

{{
  "competitors": [
    {{
      "name": "Company Name",
      "description": "What they do",
      "category": "direct|indirect|substitute",
      "funding_status": "bootstrapped|seed|series-a|series-b|public|unknown",
      "user_complaints": ["specific complaints"],
      "strengths": ["what they do well"],
      "weaknesses": ["where they fall short"],
      "pricing": "pricing model or 'unknown'",
      "market_position": "leader|challenger|niche|startup"
    }}
  ],
  "market_gaps": ["gaps in the current market"],
  "opportunities": ["opportunities for differentiation"],
  "competitive_landscape": "overall assessment",
  "total_competitors": 0
}}
""" + JSON_ONLY_INSTRUCTION

MARKET_SIZE_PROMPT = """You are a market sizing analyst. Estimate the market for this startup idea using realistic, conservative figures in USD:

""" + IDEA_CONTEXT + """

{{
  "total_addressable_market": {{"value": 15000000000, "currency": "USD", "timeframe": "annual", "source": "basis for the estimate"}},
  "serviceable_addressable_market": {{"value": 1500000000, "currency": "USD", "description": "realistic addressable portion"}},
  "serviceable_obtainable_market": {{"value": 30000000, "currency": "USD", "description": "5-year capture estimate"}},
  "market_growth_rate": {{"annual": 22, "trend": "growing|stable|declining", "drivers": ["growth driver"]}},
  "market_segments": [{{"segment": "Segment name", "size": 2000000000, "growth_potential": "high|medium|low"}}],
  "industry_trends": ["current trend"],
  "market_maturity": "emerging|growing|mature|declining",
  "key_insights": ["important market insight"]
}}
""" + JSON_ONLY_INSTRUCTION

SCALABILITY_PROMPT = """You are a startup scaling expert. Analyze how this business could scale:

""" + IDEA_CONTEXT + """

{{
  "scalability_score": 70,
  "business_model": {{"type": "saas|marketplace|product|service|hybrid", "scalability_rating": "high|medium|low", "revenue_model": "how it earns", "unit_economics": "summary"}},
  "scaling_factors": [{{"factor": "name", "category": "technology|operations|market|financial|team", "impact": "high|medium|low", "scalability": "excellent|good|challenging", "details": "explanation"}}],
  "growth_potential": {{"short_term": "1-2 year outlook", "long_term": "5+ year outlook", "global_potential": true, "market_expansion": ["expansion path"]}},
  "scaling_challenges": [{{"challenge": "name", "severity": "high|medium|low", "solution": "approach", "timeframe": "when"}}],
  "revenue_streams": [{{"stream": "name", "scalability": "high|medium|low", "implementation": "how"}}],
  "infrastructure_needs": {{"technology": ["need"], "operations": ["need"], "team": ["role"], "funding": "estimate"}},
  "benchmark_comparisons": [{{"company": "name", "similarity": "why comparable", "scaling_lessons": "lesson"}}]
}}
""" + JSON_ONLY_INSTRUCTION

MOAT_PROMPT = """You are an expert in competitive strategy. Analyze how defensible this business could become:

""" + IDEA_CONTEXT + """

{{
  "moat_score": 60,
  "defensibility_factors": [{{"factor": "name", "category": "network-effects|switching-costs|economies-of-scale|brand|regulatory|technology|data|location", "strength": "high|medium|low", "sustainability": "long-term|medium-term|short-term", "details": "explanation", "build_time": "estimate"}}],
  "competitive_threats": [{{"threat": "name", "likelihood": "high|medium|low", "impact": "high|medium|low", "timeframe": "when", "mitigation": "response"}}],
  "barriers_to_build": [{{"barrier": "name", "category": "capital|expertise|network|regulation|time|partnerships", "difficulty": "high|medium|low", "timeline": "estimate", "cost": "estimate"}}],
  "moat_strategy": {{"primary_moat": "main moat", "secondary_moats": ["moat"], "building_sequence": ["step"], "timeline": "estimate", "key_milestones": ["milestone"]}},
  "first_mover_advantages": [{{"advantage": "name", "duration": "permanent|long-term|medium-term|short-term", "strength": "description"}}],
  "network_effects": {{"potential": "high|medium|low|none", "type": "kind", "scaling_factor": "how it scales", "critical_mass": "users needed"}},
  "switching_costs": {{"data_lock": "high|medium|low", "learning_curve": "high|medium|low", "integration": "high|medium|low", "financial_cost": "high|medium|low"}}
}}
""" + JSON_ONLY_INSTRUCTION

UNIQUENESS_PROMPT = """You are a positioning strategist. Identify the unique value zone of this startup idea relative to existing solutions:

""" + IDEA_CONTEXT + """

{{
  "unique_value_proposition": {{"primary_value": "core value", "secondary_values": ["value"], "target_differentiator": "what sets it apart"}},
  "competitive_advantages": [{{"advantage": "name", "category": "technology|business-model|user-experience|pricing|market-positioning", "strength": "high|medium|low", "evidence": "support", "defensibility": "high|medium|low"}}],
  "market_gaps": [{{"gap": "name", "opportunity": "description", "market_size": "large|medium|niche", "timing_advantage": true}}],
  "differentiation_strategy": {{"primary_differentiator": "main", "supporting_differentiators": ["other"], "positioning_statement": "statement", "target_weakness": "competitor weakness exploited"}},
  "uniqueness_score": 65,
  "risk_factors": [{{"risk": "name", "impact": "high|medium|low", "mitigation": "response"}}]
}}
""" + JSON_ONLY_INSTRUCTION

STARTUP_ANALYSIS_PROMPT = """You are an expert startup advisor. Analyze this startup idea using the collected discussion evidence.

STARTUP IDEA:
"{idea}"

DISCUSSION EVIDENCE:
{evidence}

Be honest and data-driven. If data is limited, acknowledge it but still give your best judgment.

{{
  "recommendation": "BUILD|PIVOT|PASS",
  "reasoning": "why you made this recommendation",
  "confidence": 75,
  "risks": [{{"type": "MARKET|TECHNICAL|COMPETITIVE|REGULATORY", "level": "LOW|MEDIUM|HIGH", "description": "risk", "mitigation": "how to address it"}}],
  "opportunities": ["market opportunity"],
  "next_steps": ["actionable next step"],
  "market_size": {{"tam": 1000000000, "sam": 100000000, "som": 10000000}}
}}
""" + JSON_ONLY_INSTRUCTION
