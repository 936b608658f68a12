from __future__ import annotations

from prospect_fusion.schema import FieldTag, RecordSchema, SourceChannel

# Keys seen across channel payloads, most specific first.
PROSPECT_SCHEMA = RecordSchema.from_mapping(
    {
        FieldTag.NAME: ["name", "full_name", "display_name"],
        FieldTag.NAME_PARTS: ["first_name", "last_name"],
        FieldTag.EMAIL: ["email", "email_address"],
        FieldTag.PHONE: ["phone", "phone_number", "mobile"],
        FieldTag.LOCATION: ["location", "city", "address"],
        FieldTag.OCCUPATION: ["occupation", "job_title", "headline"],
        FieldTag.INTERESTS: ["interests", "skills"],
        FieldTag.KEYWORDS: ["keywords", "tags"],
        FieldTag.SIGNALS: ["signals"],
        FieldTag.TEXT: ["text", "content", "bio"],
        FieldTag.URL: ["url", "social_url", "profile_url"],
        FieldTag.FOLLOWERS: ["followers", "follower_count"],
        FieldTag.ENGAGEMENT: ["engagement", "engagement_count"],
        FieldTag.MUTUAL_CONNECTIONS: ["mutual_connections", "mutuals", "mutual_friends"],
        FieldTag.INTERACTIONS: ["past_interactions", "interactions", "interaction_count"],
    }
)

# Export dumps use the platforms' own column names.
LINKEDIN_EXPORT_SCHEMA = RecordSchema.from_mapping(
    {
        **PROSPECT_SCHEMA.tag_to_columns,
        FieldTag.NAME_PARTS: ["first_name", "last_name", "First Name", "Last Name"],
        FieldTag.EMAIL: ["email", "Email Address"],
        FieldTag.OCCUPATION: ["occupation", "Position", "headline"],
        FieldTag.URL: ["url", "URL", "profile_url"],
    }
)

FB_EXPORT_SCHEMA = RecordSchema.from_mapping(
    {
        **PROSPECT_SCHEMA.tag_to_columns,
        FieldTag.NAME: ["name", "friend_name", "full_name"],
        FieldTag.URL: ["url", "profile_url", "social_url"],
    }
)

CHANNEL_SCHEMAS: dict[SourceChannel, RecordSchema] = {
    SourceChannel.LINKEDIN_EXPORT: LINKEDIN_EXPORT_SCHEMA,
    SourceChannel.FB_EXPORT: FB_EXPORT_SCHEMA,
}
