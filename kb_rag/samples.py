"""Built-in sample content used when an ingester has no configured origin."""

from __future__ import annotations

from typing import Dict, List

from .config import RepositoryRef


def repository_sample_files(repo: RepositoryRef) -> List[Dict[str, str]]:
    """Placeholder files for a repository when no access token is set."""
    return [
        {
            "path": "README.md",
            "content": f"# {repo.name}\n\nProject overview and documentation.",
        },
        {
            "path": "docs/architecture.md",
            "content": "# Architecture\n\nSystem architecture documentation.",
        },
    ]


WORKSPACE_SAMPLE_PAGES: List[Dict[str, str]] = [
    {
        "id": "page-1",
        "title": "GTMVP Services Overview",
        "content": """# GTMVP Services

## AI Automation
- Customer service chatbots
- Lead qualification systems
- Content creation tools
- Saves 20+ hours per week

## Paid Ads Management
- Google, Facebook, Instagram, YouTube campaigns
- 3.2x average ROAS improvement
- 40% cost per acquisition decrease

## MVP Development
- Launch in weeks, not months
- Full-stack development
- Product strategy included

## Developer Matching
- Connect with vetted talent
- Technical assessment included
- Project management support""",
    },
    {
        "id": "page-2",
        "title": "Pricing & Packages",
        "content": """# GTMVP Pricing

## AI Automation Packages
- **Starter**: $2,500/month - 1 chatbot + basic automation
- **Growth**: $5,000/month - Multiple bots + workflows
- **Enterprise**: Custom - Full automation suite

## Ads Management
- **Setup Fee**: $1,500 one-time
- **Management**: 15% of ad spend (minimum $2,000/month)

## MVP Development
- **MVP Package**: $15,000-$30,000
- **Includes**: Strategy, design, development, launch
- **Timeline**: 6-12 weeks

## Developer Matching
- **Placement Fee**: 20% of first year salary
- **Hourly Contractors**: $75-150/hour depending on skills""",
    },
    {
        "id": "page-3",
        "title": "Case Study: SaaS Chatbot Implementation",
        "content": """# Case Study: AI Customer Service Chatbot

**Client**: B2B SaaS company (50 employees)

**Challenge**:
- Support team overwhelmed with repetitive questions
- 24/7 coverage needed
- Response time averaging 4 hours

**Solution**:
- Deployed AI chatbot trained on knowledge base
- Integrated with Zendesk and Slack
- Automated 70% of common inquiries

**Results**:
- Response time reduced to < 30 seconds
- Support team saved 100+ hours/month
- Customer satisfaction increased 35%
- ROI achieved in 3 months

**Tech Stack**: Claude AI, Next.js, Supabase, Vercel""",
    },
    {
        "id": "page-4",
        "title": "Technical Capabilities",
        "content": """# GTMVP Technical Stack

## Frontend
- React, Next.js, Vue.js
- Tailwind CSS, shadcn/ui
- TypeScript

## Backend
- Node.js, Python, Go
- Supabase, Firebase, PostgreSQL
- RESTful APIs, GraphQL

## AI/ML
- Claude AI (Anthropic)
- OpenAI GPT-4
- Custom embeddings
- RAG systems

## DevOps
- Vercel, AWS, Google Cloud
- GitHub Actions, CircleCI
- Docker, Kubernetes

## Integrations
- Slack, Discord, Teams
- Stripe, PayPal
- Google Workspace
- CRM systems (HubSpot, Salesforce)""",
    },
]


STATIC_SAMPLE_PAGES: List[Dict[str, str]] = [
    {
        "slug": "home",
        "url": "https://gtmvp.com/",
        "title": "GTMVP - Go-To-Market MVP Services",
        "content": (
            "GTMVP helps founders validate ideas and launch faster. Our services cover "
            "AI automation, paid ads management, MVP development and developer matching."
        ),
        "lastUpdated": "2025-01-15T00:00:00Z",
    },
    {
        "slug": "mvp-development",
        "url": "https://gtmvp.com/mvp-development",
        "title": "MVP Development Pricing",
        "content": (
            "GTMVP offers MVP development starting at $2,500. Packages include product "
            "strategy, design, full-stack development and launch support in 6-12 weeks."
        ),
        "lastUpdated": "2025-01-15T00:00:00Z",
    },
    {
        "slug": "ai-automation",
        "url": "https://gtmvp.com/ai-automation",
        "title": "AI Automation Services",
        "content": (
            "Our AI automation saves 20 hours per week by handling customer service, "
            "lead qualification and content workflows."
        ),
        "lastUpdated": "2025-01-15T00:00:00Z",
    },
]
