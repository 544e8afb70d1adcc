"""
Generated event data for providers without credentials or public APIs.

Everything here is deterministic for a given calendar day: ids are stable and
randomness comes from an RNG seeded with the source, city and date, so running
the pipeline twice on the same day produces identical records.
"""

import random
from abc import abstractmethod
from datetime import timedelta
from typing import List, Dict, Any

from eventsphere.normalizer import standardize_city
from eventsphere.records import RawEventRecord
from eventsphere.sources.base import SourceAdapter


_UNSPLASH = 'https://images.unsplash.com/{}?w=800&h=400&auto=format&fit=crop'


class FixedListAdapter(SourceAdapter):
    """Serves a fixed list of events whose dates are offsets from today."""

    EVENTS: List[Dict[str, Any]] = []

    def fetch_records(self) -> List[RawEventRecord]:
        today = self.today()
        records = []
        for template in self.EVENTS:
            data = dict(template)
            data['date'] = (today + timedelta(days=data.pop('days_ahead'))).isoformat()
            records.append(RawEventRecord.from_dict(data))
        return records


class SimulatedTicketmasterAdapter(FixedListAdapter):
    notice = "Using enhanced mock data - API key not configured"

    EVENTS = [
        {
            'id': 'tm_enhanced_1',
            'title': 'AR Rahman Live in Concert',
            'description': 'The Oscar-winning composer performs his greatest hits including tracks from '
                           'Slumdog Millionaire, Roja, and recent compositions.',
            'days_ahead': 21,
            'time': '19:30',
            'venue': 'DY Patil Stadium',
            'address': 'Nerul, Navi Mumbai, Maharashtra',
            'city': 'Mumbai',
            'price': 3500,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1493225457124-a3eb161ffa5f'),
            'source_url': 'https://in.bookmyshow.com/ar-rahman-live',
            'organizer': 'DNA Entertainment',
        },
        {
            'id': 'tm_enhanced_2',
            'title': 'IPL: Delhi Capitals vs Mumbai Indians',
            'description': 'Witness the clash of titans in this high-octane IPL match at the iconic '
                           'Arun Jaitley Stadium.',
            'days_ahead': 35,
            'time': '19:30',
            'venue': 'Arun Jaitley Stadium',
            'address': 'ITO, New Delhi',
            'city': 'Delhi',
            'price': 2000,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1540747913346-19e32dc3e97e'),
            'source_url': 'https://tickets.iplt20.com',
            'organizer': 'Board of Control for Cricket in India',
        },
    ]


class SimulatedPredictHQAdapter(FixedListAdapter):
    notice = "Using enhanced mock data - API token not configured"

    EVENTS = [
        {
            'id': 'phq_enhanced_1',
            'title': 'Ganesh Chaturthi Festival',
            'description': "Mumbai's grandest festival celebration with elaborate pandals, cultural "
                           "programs, and the famous visarjan procession.",
            'days_ahead': 14,
            'time': '06:00',
            'venue': 'Lalbaugcha Raja',
            'address': 'Lalbaug, Mumbai, Maharashtra',
            'city': 'Mumbai',
            'price': 0,
            'is_free': True,
            'image_url': _UNSPLASH.format('photo-1533174072545-7a4b6ad7a6c3'),
            'source_url': 'https://lalbaugcharaja.in',
            'organizer': 'Lalbaugcha Raja Sarvajanik Ganeshotsav Mandal',
        },
        {
            'id': 'phq_enhanced_2',
            'title': 'Diwali Mela & Cultural Show',
            'description': 'A vibrant celebration of lights featuring traditional crafts, food stalls, '
                           'cultural performances, and fireworks display.',
            'days_ahead': 28,
            'time': '17:00',
            'venue': 'Red Fort Grounds',
            'address': 'Chandni Chowk, Old Delhi',
            'city': 'Delhi',
            'price': 200,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1605379399642-870262d3d051'),
            'source_url': 'https://delhitourism.gov.in',
            'organizer': 'Delhi Tourism Board',
        },
    ]


class CuratedShowcaseAdapter(FixedListAdapter):
    """Hand-picked flagship events shown under the EventSphere Pro label"""

    EVENTS = [
        {
            'id': 'enhanced_1',
            'title': 'Mumbai International Film Festival',
            'description': 'A celebration of cinema featuring international and Indian films, '
                           'documentaries, and short films from emerging filmmakers.',
            'days_ahead': 30,
            'time': '18:00',
            'venue': 'National Centre for the Performing Arts',
            'address': 'Nariman Point, Mumbai, Maharashtra',
            'city': 'Mumbai',
            'price': 1200,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1489599849927-2ee91cede3ba'),
            'source_url': 'https://miff.in',
            'organizer': 'Mumbai Film Society',
        },
        {
            'id': 'enhanced_2',
            'title': 'Delhi Tech Summit',
            'description': 'The largest technology conference in North India featuring talks by industry '
                           'leaders, startup showcases, and networking opportunities.',
            'days_ahead': 12,
            'time': '09:00',
            'venue': 'India Expo Centre',
            'address': 'Greater Noida, Delhi NCR',
            'city': 'Delhi',
            'price': 2500,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1540575467063-178a50c2df87'),
            'source_url': 'https://delhitechsummit.com',
            'organizer': 'TechIndia Events',
        },
        {
            'id': 'enhanced_3',
            'title': 'Bangalore Food Festival',
            'description': 'A culinary celebration featuring street food, fine dining, cooking workshops, '
                           'and food truck experiences from across Karnataka.',
            'days_ahead': 9,
            'time': '16:00',
            'venue': 'Palace Grounds',
            'address': 'Sadashiva Nagar, Bengaluru, Karnataka',
            'city': 'Bengaluru',
            'price': 800,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1555939594-58d7cb561ad1'),
            'source_url': 'https://bangalorefoodfest.com',
            'organizer': 'Karnataka Tourism',
        },
        {
            'id': 'enhanced_4',
            'title': 'Stand-up Comedy Night',
            'description': "An evening of laughter with some of India's most loved comedians. Special "
                           "guest appearances and interactive comedy segments.",
            'days_ahead': 5,
            'time': '20:00',
            'venue': 'Phoenix Marketcity',
            'address': 'Kurla West, Mumbai, Maharashtra',
            'city': 'Mumbai',
            'price': 1800,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1485846234645-a62644f84728'),
            'source_url': 'https://insider.in/comedy',
            'organizer': 'Comedy Central India',
        },
        {
            'id': 'enhanced_5',
            'title': 'Delhi Half Marathon',
            'description': "Join thousands of runners in the capital's premier running event. Categories "
                           "for all levels from 5K fun run to full half marathon.",
            'days_ahead': 45,
            'time': '06:00',
            'venue': 'Jawaharlal Nehru Stadium',
            'address': 'Lodhi Road, New Delhi',
            'city': 'Delhi',
            'price': 1500,
            'is_free': False,
            'image_url': _UNSPLASH.format('photo-1571019613454-1cb2f99b2d8b'),
            'source_url': 'https://delhihalfmarathon.com',
            'organizer': 'Athletics Federation of India',
        },
    ]


class SeededCityAdapter(SourceAdapter):
    """Generates events per city with an RNG seeded by source, city and day."""

    def __init__(self, source, cities: List[str], **kwargs):
        super().__init__(source, **kwargs)
        self.cities = cities

    def rng_for(self, city: str) -> random.Random:
        return random.Random(f"{self.source.id}:{city}:{self.today().isoformat()}")

    @abstractmethod
    def generate(self, city: str) -> List[RawEventRecord]:
        """Records for one city"""

    def fetch_records(self) -> List[RawEventRecord]:
        records = []
        for city in self.cities:
            records.extend(self.generate(city))
        return records


ALLEVENTS_TEMPLATES = [
    {
        'type': 'workshop',
        'titles': ['Digital Marketing Workshop', 'Photography Masterclass', 'Startup Pitch Workshop',
                   'UI/UX Design Bootcamp', 'Data Science Fundamentals'],
        'venues': ['Creative Hub', 'Innovation Center', 'Tech Park', 'Co-working Space'],
        'prices': [800, 1200, 1500, 2000],
        'categories': ['business', 'technology', 'arts'],
    },
    {
        'type': 'meetup',
        'titles': ['Tech Entrepreneurs Meetup', 'Women in Tech Network', 'Startup Founders Circle',
                   'React Developers Meetup', 'AI/ML Community Meetup'],
        'venues': ['Tech Hub', 'Innovation Lab', 'WeWork', 'Impact Hub'],
        'prices': [0, 200, 500],
        'categories': ['technology', 'business'],
    },
    {
        'type': 'cultural',
        'titles': ['Art Exhibition Opening', 'Cultural Music Festival', 'Photography Exhibition',
                   'Local Artists Showcase', 'Heritage Walk'],
        'venues': ['Art Gallery', 'Cultural Center', 'Museum', 'Heritage Site'],
        'prices': [300, 500, 800, 0],
        'categories': ['arts', 'music'],
    },
]

ALLEVENTS_DESCRIPTIONS = {
    'Digital Marketing Workshop': 'Learn the latest digital marketing strategies and tools. This comprehensive '
                                  'workshop covers SEO, social media marketing, content strategy, and analytics. '
                                  'Perfect for entrepreneurs and marketing professionals in {city}.',
    'Photography Masterclass': 'Improve your photography skills with hands-on training from professional '
                               'photographers. Covers composition, lighting, editing, and portfolio '
                               'development. All skill levels welcome.',
    'Tech Entrepreneurs Meetup': 'Connect with like-minded entrepreneurs and tech enthusiasts in {city}. '
                                 'Network, share ideas, and learn from successful founders in the startup '
                                 'ecosystem.',
    'Art Exhibition Opening': 'Discover works by emerging and established artists from {city} and beyond. '
                              'This exhibition showcases contemporary art, installations, and interactive '
                              'displays.',
}

NEIGHBOURHOODS = {
    'Mumbai': ['Bandra West', 'Andheri East', 'Powai', 'Lower Parel', 'Worli', 'Malad West'],
    'New Delhi': ['Connaught Place', 'Karol Bagh', 'Lajpat Nagar', 'Hauz Khas', 'Janakpuri', 'Dwarka'],
    'Bengaluru': ['Koramangala', 'Indiranagar', 'Whitefield', 'Electronic City', 'Jayanagar', 'BTM Layout'],
}

ORGANIZERS = {
    'workshop': ['{city} Skill Development Center', '{city} Innovation Hub', 'SkillShare India'],
    'meetup': ['{city} Tech Community', '{city} Entrepreneurs Network', 'Meetup India'],
    'cultural': ['{city} Cultural Society', '{city} Arts Council', 'Heritage Foundation'],
}

EVENT_TIMES = ['09:00', '10:00', '14:00', '17:00', '18:00', '18:30', '19:00', '19:30', '20:00']

CATEGORY_IMAGES = {
    'technology': _UNSPLASH.format('photo-1518709268805-4e9042af2176'),
    'business': _UNSPLASH.format('photo-1559136555-9303baea8ebd'),
    'arts': _UNSPLASH.format('photo-1578662996442-48f60103fc96'),
    'music': _UNSPLASH.format('photo-1493225457124-a3eb161ffa5f'),
}


class AllEventsAdapter(SeededCityAdapter):
    """AllEvents.in style community listings, one per template per city"""

    def generate(self, city):
        rng = self.rng_for(city)
        city_name = standardize_city(city)
        records = []

        for template_index, template in enumerate(ALLEVENTS_TEMPLATES):
            title = rng.choice(template['titles'])
            venue = rng.choice(template['venues'])
            price = rng.choice(template['prices'])
            category = rng.choice(template['categories'])
            days_ahead = rng.randint(1, 60)
            description = ALLEVENTS_DESCRIPTIONS.get(
                title,
                'Join us for this exciting event in {city}. A great opportunity to learn, network, and '
                'experience something new in the vibrant cultural scene of {city}.',
            ).format(city=city_name)
            neighbourhood = rng.choice(NEIGHBOURHOODS.get(city_name, ['Central Area']))
            organizer = rng.choice(ORGANIZERS[template['type']]).format(city=city_name)

            records.append(RawEventRecord(
                id=f"allevents_{city.lower()}_{template_index}",
                title=f"{title} {city_name}",
                description=description,
                date=(self.today() + timedelta(days=days_ahead)).isoformat(),
                time=rng.choice(EVENT_TIMES),
                venue=f"{venue} {city_name}",
                address=f"{neighbourhood}, {city_name}",
                city=city_name,
                price=price,
                is_free=price == 0,
                image_url=CATEGORY_IMAGES.get(category),
                source_url=f"https://allevents.in/{city.lower()}/{title.lower().replace(' ', '-')}",
                organizer=organizer,
            ))

        return records


class CityTemplateAdapter(SeededCityAdapter):
    """One templated listing per city, formatted with the city name"""

    TEMPLATE: Dict[str, Any] = {}

    def generate(self, city):
        city_name = standardize_city(city)
        slug = city.lower().replace(' ', '-')
        data = {key: value.format(city=city_name, slug=slug) if isinstance(value, str) else value
                for key, value in self.TEMPLATE.items()}
        data['date'] = (self.today() + timedelta(days=data.pop('days_ahead'))).isoformat()
        data['city'] = city_name
        return [RawEventRecord.from_dict(data)]


class EventbriteTemplateAdapter(CityTemplateAdapter):
    TEMPLATE = {
        'id': 'eb_{slug}_1',
        'title': 'Tech Conference {city}',
        'description': 'The biggest technology conference in {city}',
        'days_ahead': 40,
        'time': '09:00',
        'venue': '{city} Convention Center',
        'address': 'Main Street, {city}',
        'price': 1500,
        'is_free': False,
        'source_url': 'https://eventbrite.com/tech-{slug}',
        'category': 'technology',
        'organizer': 'TechEvents',
    }


class MeetupTemplateAdapter(CityTemplateAdapter):
    TEMPLATE = {
        'id': 'meetup_{slug}_1',
        'title': '{city} Startup Networking',
        'description': 'Monthly networking event for startups in {city}',
        'days_ahead': 16,
        'time': '18:30',
        'venue': 'Co-working Space {city}',
        'address': 'Business District, {city}',
        'price': 0,
        'is_free': True,
        'source_url': 'https://meetup.com/startup-{slug}',
        'category': 'business',
        'organizer': 'Startup Community',
    }


class BookMyShowTemplateAdapter(CityTemplateAdapter):
    TEMPLATE = {
        'id': 'bms_{slug}_1',
        'title': 'Live Music Concert - {city}',
        'description': 'Amazing live music performance in {city}',
        'days_ahead': 50,
        'time': '19:00',
        'venue': '{city} Arena',
        'address': 'Entertainment District, {city}',
        'price': 2000,
        'is_free': False,
        'source_url': 'https://bookmyshow.com/music-{slug}',
        'category': 'music',
        'organizer': 'BookMyShow',
    }
